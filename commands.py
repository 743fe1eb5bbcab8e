# Quick reference commands (run from repo root). These are comments only; copy/paste as needed.

# Install (editable, with test tools) and the Playwright browser
# python -m pip install -e ".[test]"
# python -m playwright install chromium

# Run the full test suite (DB tests are skipped unless DATABASE_URL is set)
# python -m pytest
# DATABASE_URL=postgresql://localhost/jobpilot_test python -m pytest tests/test_jobs_store.py

# Run the job bot worker (startup cycle, then the scheduler loop)
# python main.py
# TEST_MODE=true python main.py

# Dashboard + Telegram bot (+ scheduled tasks) on API_PORT (3456)
# python -m scripts.command_center --scheduler
# python -m uvicorn app.api:app --port 3456 --reload

# One-off runs
# python -m scripts.search_jobs
# python -m scripts.monitor_careers --top 5
# python -m scripts.monitor_careers "Simform" "Crest Data Systems"
# python -m scripts.import_companies data/ahmedabad_companies.csv --city ahmedabad --category product

# Inspect the database
# python -m scripts.db_shell
# python -m scripts.db_shell "SELECT title, company_name, ai_match_score FROM jobs ORDER BY ai_match_score DESC LIMIT 10"
