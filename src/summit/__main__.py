import sys
import logging
from pathlib import Path

from summit.config import Settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    """Send logs to a file; the terminal belongs to the TUI."""
    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(settings.log_file),
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_seed(settings: Settings, json_path: Path) -> int:
    """Load an attraction snapshot into the local database."""
    from summit.db import AgendaDB
    from summit.data_loader import load_attractions_from_json

    print("Summit seed")
    print("=" * 40)

    if not json_path.exists():
        print(f"File not found: {json_path}")
        return 1

    attractions = load_attractions_from_json(json_path)
    with AgendaDB(settings.db_path) as db:
        for attraction in attractions:
            db.upsert_attraction(attraction)
        db.commit()
        print(f"{len(attractions)} attractions loaded, {db.attraction_count()} in {settings.db_path}")
    logger.info("Seeded %d attractions from %s", len(attractions), json_path)
    return 0


def run_app(settings: Settings):
    """Launch the TUI application."""
    from summit.app import SummitApp
    app = SummitApp(settings)
    app.run()


def main():
    settings = Settings()
    configure_logging(settings)
    if len(sys.argv) > 1 and sys.argv[1] == "seed":
        if len(sys.argv) < 3:
            print("usage: summit seed <attractions.json>")
            sys.exit(2)
        sys.exit(run_seed(settings, Path(sys.argv[2])))
    run_app(settings)


if __name__ == "__main__":
    main()
