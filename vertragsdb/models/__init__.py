"""Central model registry: import all models so Alembic autodiscover works."""

from vertragsdb.database import Base  # noqa: F401

from vertragsdb.models.user import User  # noqa: F401
from vertragsdb.models.contract import Contract  # noqa: F401
from vertragsdb.models.document import ContractDocument  # noqa: F401
from vertragsdb.models.category import Category  # noqa: F401
