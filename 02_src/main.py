"""Main entry point for the clinic agent."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from clinic_agent import Application, Settings
from clinic_agent.api import create_fastapi_app
from clinic_agent.logging_config import setup_logging
from sim import Sim


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    settings = Settings.from_env()
    setup_logging(settings.log_level)

    api_url = f"http://{settings.api_host}:{settings.api_port}"
    sim = Sim(api_url=api_url)

    application = Application(settings)
    app = create_fastapi_app(application, sim=sim)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
