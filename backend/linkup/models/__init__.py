# Models package init
"""
Importing this package registers every table on `Base.metadata`
(used by Alembic autogenerate and by test fixtures that call create_all).
"""

from linkup.models.link import Link
from linkup.models.user import User

__all__ = ["Link", "User"]
