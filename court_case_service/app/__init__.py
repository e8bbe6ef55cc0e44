# court_case_service/app/__init__.py
import logging

logger = logging.getLogger(__name__)
logger.info("Court Case App Initialized")
