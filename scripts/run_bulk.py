"""Submit a bulk analysis job to a running API, poll it and save the export.

Input is a text file with one hadith per line, or a JSON list of strings.

Run example:
    python scripts/run_bulk.py --input hadiths.txt --format csv --output results.csv
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List

import requests

REQUEST_TIMEOUT = 30
MAX_TEXTS_PER_JOB = 100

logger = logging.getLogger("run_bulk")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a bulk hadith analysis job through the API.")
    parser.add_argument("--input", type=Path, required=True, help="Text file (one hadith per line) or JSON list.")
    parser.add_argument("--api-url", type=str, default="http://localhost:8000", help="API base URL.")
    parser.add_argument("--format", choices=["json", "csv"], default="json", help="Export format.")
    parser.add_argument("--output", type=Path, default=None, help="Export destination; defaults to <job_id>.<format>.")
    parser.add_argument("--user-id", type=str, default=None, help="Optional user id stored with the job.")
    parser.add_argument("--poll-interval", type=float, default=1.0, help="Seconds between progress polls.")
    parser.add_argument("--timeout", type=float, default=600.0, help="Give up polling after this many seconds.")
    return parser.parse_args()


def load_texts(path: Path) -> List[str]:
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        payload = json.loads(raw)
        if not isinstance(payload, list):
            raise ValueError(f"{path} must contain a JSON list of strings.")
        texts = [str(item) for item in payload]
    else:
        texts = raw.splitlines()
    return [text.strip() for text in texts if text.strip()]


def submit(session: requests.Session, api_url: str, texts: List[str], user_id: str | None) -> str:
    response = session.post(
        f"{api_url}/bulk",
        json={"texts": texts, "user_id": user_id},
        timeout=REQUEST_TIMEOUT,
    )
    if response.status_code != 202:
        raise RuntimeError(f"Submit failed ({response.status_code}): {response.text}")
    return response.json()["job_id"]


def wait_for_job(
    session: requests.Session,
    api_url: str,
    job_id: str,
    poll_interval: float,
    timeout: float,
) -> Dict[str, Any]:
    deadline = time.monotonic() + timeout
    last_processed = -1
    while True:
        response = session.get(f"{api_url}/bulk/{job_id}", timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        job = response.json()

        if job["processed"] != last_processed:
            last_processed = job["processed"]
            print(f"  {job['processed']}/{job['total']}  {job.get('current_text') or ''}")

        if job["status"] != "processing":
            return job
        if time.monotonic() > deadline:
            raise TimeoutError(f"Job {job_id} still processing after {timeout:.0f}s")
        time.sleep(poll_interval)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args()
    api_url = args.api_url.rstrip("/")

    try:
        texts = load_texts(args.input)
    except (OSError, ValueError) as exc:
        print(f"[ERROR] Could not read {args.input}: {exc}")
        return 1
    if not texts:
        print(f"[ERROR] No hadith texts found in {args.input}")
        return 1
    if len(texts) > MAX_TEXTS_PER_JOB:
        logger.warning("Input has %d texts; the API accepts at most %d per job", len(texts), MAX_TEXTS_PER_JOB)

    session = requests.Session()
    try:
        job_id = submit(session, api_url, texts, args.user_id)
        print(f"Submitted job {job_id} with {len(texts)} text(s)")

        job = wait_for_job(session, api_url, job_id, args.poll_interval, args.timeout)
        if job["status"] == "error":
            print(f"[ERROR] Job {job_id} failed after {job['processed']}/{job['total']}: {job.get('error')}")
            return 1

        response = session.get(
            f"{api_url}/bulk/{job_id}/export",
            params={"format": args.format},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
    except (requests.RequestException, RuntimeError, TimeoutError) as exc:
        print(f"[ERROR] {exc}")
        return 1
    finally:
        session.close()

    output = args.output or Path(f"{job_id}.{args.format}")
    output.write_text(response.content.decode("utf-8"), encoding="utf-8")
    print(f"Exported {len(texts)} analysis result(s) to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
