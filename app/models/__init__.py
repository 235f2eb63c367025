# app/models/__init__.py
from app.db.base import Base  # noqa: F401

from . import license         # noqa: F401
from . import person          # noqa: F401
from . import license_person  # noqa: F401
from . import mail_log        # noqa: F401
from . import message_template  # noqa: F401
from . import smtp_setting    # noqa: F401
