import logging
import os
import sys
import traceback

import uvicorn

# Configure logging to stdout until the app installs its own handler
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Add the src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)


def _flag(*names: str) -> str:
    return '✅ set' if any(os.environ.get(n) for n in names) else '❌ not set'


def main() -> None:
    logger.info("=" * 60)
    logger.info("Teleconsult Access Startup")
    logger.info("=" * 60)
    logger.info(f"Python version: {sys.version.split()[0]}")

    # Log critical environment variables (without exposing secrets)
    logger.info("Environment Configuration:")
    logger.info(f"  PORT: {os.environ.get('PORT', '8000')}")
    logger.info(f"  APP_ENV: {os.environ.get('APP_ENV', 'not set')}")
    logger.info(f"  DECRYPT_KEY: {_flag('DECRYPT_KEY', 'DECRYPTION_KEY')}")
    logger.info(f"  CRM_TOKEN_URL: {_flag('CRM_TOKEN_URL')}")
    logger.info(f"  CRM_TELE_MOBILE_URL: {_flag('CRM_TELE_MOBILE_URL')}")
    logger.info(f"  OTP_SMS_PASSWORD: {_flag('OTP_SMS_PASSWORD')}")

    try:
        from teleconsult.core.config import get_settings

        settings = get_settings()
    except Exception as settings_error:
        logger.error(f"❌ Failed to load settings: {settings_error}")
        logger.error(traceback.format_exc())
        sys.exit(1)

    host = settings.host
    port = int(os.environ.get("PORT", settings.port))
    logger.info(f"Starting uvicorn server on {host}:{port}...")
    try:
        uvicorn.run(
            "teleconsult.app:app",
            host=host,
            port=port,
            # sessions are process-local; see gunicorn.conf.py
            workers=1,
            log_level=settings.logging.level.lower(),
            access_log=True,
            timeout_keep_alive=75,
            timeout_graceful_shutdown=30,
        )
    except KeyboardInterrupt:
        logger.info("⚠️  Shutting down due to keyboard interrupt")
        sys.exit(0)


if __name__ == "__main__":
    main()
