"""Entry point for running FinTrack via `python -m fintrack`."""

from fintrack import FinTrackService
from fintrack.core.settings import get_fintrack_config

if __name__ == "__main__":
    config = get_fintrack_config()
    url = config.FINTRACK.URL

    print(f"Starting FinTrack service at {url}...")
    print("Press Ctrl+C to stop.")

    FinTrackService.launch(url=url)
