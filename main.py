from app.factory import create_app
from app.utils.config import settings
from app.utils.logging import configure_logging


configure_logging(settings.log_level)

app = create_app(settings)
