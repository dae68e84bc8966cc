"""ORM Models — SQLAlchemy declarative models for the archive record store.

Invariants:
    - All models inherit from Base (db/base.py)
    - Table names follow the existing archive schema; class names describe the entity

Design Decisions:
    - One file per entity for locality (ADR: ExMA max 3-4 files to understand a feature)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from arsip.models.storage_location import StorageLocation  # noqa: F401
from arsip.models.active_record import ActiveRecord  # noqa: F401
from arsip.models.classification import Classification  # noqa: F401
from arsip.models.transfer_process import TransferProcess  # noqa: F401
from arsip.models.transfer_memo import TransferMemo  # noqa: F401
from arsip.models.inactive_record import InactiveRecord  # noqa: F401
from arsip.models.transfer_link import TransferLink  # noqa: F401
from arsip.models.user import User  # noqa: F401
from arsip.models.notification import Notification  # noqa: F401
