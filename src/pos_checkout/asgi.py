from __future__ import annotations

from pos_checkout.adapters.inbound.web.fastapi_app import create_app
from pos_checkout.bootstrap import build_application
from pos_checkout.config import load_settings
from pos_checkout.logging_config import configure_logging

settings = load_settings()
configure_logging(settings.log_level, json=settings.log_json)

application = build_application(settings)
app = create_app(application.checkout, application.sales)
