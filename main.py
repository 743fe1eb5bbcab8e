"""
Entry point to run the job bot worker.
"""
from worker.main import main as worker_main


if __name__ == "__main__":
    worker_main()
