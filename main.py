"""
Main entry point for the CareerHub web app.
"""

import argparse

from dotenv import load_dotenv

from careerhub.config.settings import get_settings
from careerhub.utils.logger import get_logger, setup_logging
from careerhub.utils.paths import ensure_data_directories
from careerhub.web import create_app

# Load environment variables
load_dotenv()


def main():
    """
    Main application entry point with web UI.
    """
    parser = argparse.ArgumentParser(description="CareerHub web app")
    parser.add_argument("--config", help="Optional JSON config file", default=None)
    args = parser.parse_args()

    settings = get_settings(args.config)
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    logger = get_logger(__name__)
    ensure_data_directories(settings.exports_dir, settings.reports_dir, settings.cache_dir)

    app = create_app(settings)

    print("\n" + "=" * 70)
    print("💼 CAREERHUB - WEB UI")
    print("=" * 70)
    print(f"🌐 Opening web UI at http://localhost:{settings.port}")
    print("   Press Ctrl+C to stop\n")
    logger.info(f"Backend: {settings.backend_url}")
    app.run(debug=settings.debug, host=settings.host, port=settings.port, use_reloader=False)


if __name__ == "__main__":
    main()
