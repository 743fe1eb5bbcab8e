"""
Company list handling: loading `companies.json`, importing CSV/JSON/text files,
normalizing names and merging new entries.

`companies.json` layout:
  {"companies": {"<city>": {"<category>": [{"name": ..., "careers": ..., ...}]}}}
"""
from __future__ import annotations

import csv
import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote_plus

from core import config

log = logging.getLogger("companies")

_NAME_SUFFIXES = re.compile(
    r"\s+(private|pvt|limited|ltd|llp|inc|corp|corporation|technologies|tech|solutions|"
    r"infotech|infosystems|software|services)\.?",
    re.IGNORECASE,
)

_SKIP_PATTERNS = [
    re.compile(r"^(the|a|an|in|at|for|and|or|with)$", re.IGNORECASE),
    re.compile(r"^(page|next|prev|back|home|menu|search|login)$", re.IGNORECASE),
    re.compile(r"employees$", re.IGNORECASE),
    re.compile(r"^\d+\s*(to|-)\s*\d+$", re.IGNORECASE),
]

# CSV header aliases -> canonical field
_HEADER_ALIASES = {
    "name": "name",
    "company": "name",
    "company_name": "name",
    "companyname": "name",
    "careers_url": "careers_url",
    "careersurl": "careers_url",
    "careers": "careers_url",
    "url": "careers_url",
    "specialty": "specialty",
    "domain": "specialty",
    "industry": "specialty",
    "type": "specialty",
    "rating": "rating",
    "employees": "employees",
    "size": "employees",
    "employee_count": "employees",
    "location": "location",
    "city": "location",
    "website": "website",
    "site": "website",
}


def normalize_company_name(name: str) -> str:
    """Dedupe key: lowercase, legal/IT suffixes removed, alphanumerics only."""
    return re.sub(r"[^a-z0-9]", "", _NAME_SUFFIXES.sub("", (name or "").lower()))


def generate_careers_url(name: str, website: Optional[str] = None) -> str:
    if website:
        base = website.rstrip("/")
        if not base.startswith("http"):
            base = "https://" + base
        return f"{base}/careers"
    return f"https://www.google.com/search?q={quote_plus(f'{name} careers')}"


def load_companies_file(path: Optional[Path] = None) -> Dict:
    path = Path(path or config.COMPANIES_FILE)
    if not path.exists():
        return {"companies": {}}
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    data.setdefault("companies", {})
    return data


def save_companies_file(data: Dict, path: Optional[Path] = None) -> None:
    path = Path(path or config.COMPANIES_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def list_companies(path: Optional[Path] = None, with_careers_only: bool = False) -> List[Dict]:
    """Flatten the nested file into [{name, careers, city, category, ...}]."""
    data = load_companies_file(path)
    flat: List[Dict] = []
    for city, categories in (data.get("companies") or {}).items():
        if not isinstance(categories, dict):
            continue
        for category, companies in categories.items():
            if not isinstance(companies, list):
                continue
            for company in companies:
                if not isinstance(company, dict) or not company.get("name"):
                    continue
                if with_careers_only and not company.get("careers"):
                    continue
                entry = dict(company)
                entry["city"] = entry.get("city") or city.title()
                entry["category"] = category
                flat.append(entry)
    return flat


def parse_csv(path: Path) -> List[Dict]:
    rows: List[Dict] = []
    with Path(path).open(encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        for raw in reader:
            company: Dict = {"source": Path(path).stem}
            for header, value in raw.items():
                field = _HEADER_ALIASES.get(re.sub(r"[\s-]+", "_", (header or "").strip().lower()))
                if field and value and not company.get(field):
                    company[field] = value.strip()
            if len(company.get("name") or "") > 1:
                rows.append(company)
    return rows


def parse_json(path: Path) -> List[Dict]:
    with Path(path).open(encoding="utf-8") as f:
        data = json.load(f)
    source = Path(path).stem
    items: List[Dict] = []
    if isinstance(data, list):
        items = [d for d in data if isinstance(d, dict)]
    elif isinstance(data, dict):
        nested = data.get("companies", data)
        for city_data in nested.values():
            if isinstance(city_data, list):
                items.extend(d for d in city_data if isinstance(d, dict))
            elif isinstance(city_data, dict):
                for companies in city_data.values():
                    if isinstance(companies, list):
                        items.extend(d for d in companies if isinstance(d, dict))

    result = []
    for item in items:
        result.append(
            {
                "name": item.get("name") or item.get("company") or "",
                "careers_url": item.get("careers") or item.get("careers_url") or item.get("careersUrl") or item.get("url") or "",
                "specialty": item.get("specialty") or item.get("type"),
                "website": item.get("website"),
                "employees": item.get("employees"),
                "location": item.get("city") or item.get("location"),
                "source": source,
            }
        )
    return result


def parse_text(path: Path) -> List[Dict]:
    """One company per line; `name | careers_url` or `name, careers_url` also accepted."""
    result = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = [p.strip() for p in re.split(r"\s*\|\s*|\s*,\s*(?=https?://)", line, maxsplit=1)]
        company = {"name": parts[0], "source": Path(path).stem}
        if len(parts) > 1 and parts[1].startswith("http"):
            company["careers_url"] = parts[1]
        result.append(company)
    return result


def import_file(path: Path) -> List[Dict]:
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return parse_csv(path)
    if suffix == ".json":
        return parse_json(path)
    if suffix == ".txt":
        return parse_text(path)
    raise ValueError(f"Unsupported company file type: {suffix}")


def normalize_company(raw: Dict) -> Optional[Dict]:
    """Clean a raw record; None for names that are not company names."""
    name = re.sub(r"^\d+\.\s*", "", raw.get("name") or "")
    name = re.sub(r"\s+", " ", name).strip()
    if len(name) < 2 or name.isdigit():
        return None
    if any(p.search(name) for p in _SKIP_PATTERNS):
        return None

    careers_url = (raw.get("careers_url") or "").strip()
    if "careers" in careers_url:
        confidence = "high"
    elif raw.get("website") or raw.get("rating") or raw.get("employees"):
        confidence = "medium"
    else:
        confidence = "low"

    if len(careers_url) <= 10:
        careers_url = generate_careers_url(name, raw.get("website"))

    return {
        "name": name,
        "careers": careers_url,
        "specialty": raw.get("specialty") or "IT Services",
        "source": raw.get("source") or "unknown",
        "confidence": confidence,
    }


def aggregate(
    files: Iterable[Path],
    city: str = "ahmedabad",
    category: str = "imported",
    path: Optional[Path] = None,
) -> Dict:
    """Merge companies from files into companies.json, skipping known names."""
    data = load_companies_file(path)
    existing = {normalize_company_name(c["name"]) for c in list_companies(path)}
    bucket = data["companies"].setdefault(city.lower(), {}).setdefault(category, [])

    result = {
        "total_processed": 0,
        "new_companies": 0,
        "duplicates_skipped": 0,
        "companies_with_urls": 0,
        "companies_needing_urls": 0,
    }
    for file in files:
        try:
            raw_companies = import_file(Path(file))
        except (OSError, ValueError) as e:
            log.error("Could not import company file", extra={"file": str(file), "error": str(e)})
            continue
        for raw in raw_companies:
            result["total_processed"] += 1
            company = normalize_company(raw)
            if not company:
                continue
            key = normalize_company_name(company["name"])
            if not key or key in existing:
                result["duplicates_skipped"] += 1
                continue
            existing.add(key)
            bucket.append(company)
            result["new_companies"] += 1
            if company["careers"].startswith("https://www.google.com/search"):
                result["companies_needing_urls"] += 1
            else:
                result["companies_with_urls"] += 1

    if result["new_companies"]:
        save_companies_file(data, path)
    log.info("Company aggregation finished", extra=result)
    return result


def find_company_files(directory: Optional[Path] = None) -> List[Path]:
    """Company data files dropped into the data directory."""
    directory = Path(directory or config.DATA_DIR)
    if not directory.exists():
        return []
    target = Path(config.COMPANIES_FILE).resolve()
    return sorted(
        p
        for p in directory.iterdir()
        if p.suffix.lower() in (".csv", ".json", ".txt") and "compan" in p.name.lower() and p.resolve() != target
    )


__all__ = [
    "normalize_company_name",
    "generate_careers_url",
    "load_companies_file",
    "save_companies_file",
    "list_companies",
    "parse_csv",
    "parse_json",
    "parse_text",
    "import_file",
    "normalize_company",
    "aggregate",
    "find_company_files",
]
