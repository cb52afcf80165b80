"""
ORM models for the catalog (product lines, models, machines, leakage types),
inspections/repairs and user profiles/roles.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .catalog import (  # noqa: F401
    LeakageType,
    Machine,
    MachineModel,
    ProductLine,
)
from .security import (  # noqa: F401
    Profile,
    UserRole,
)
from .inspection import (  # noqa: F401
    InspectionRecord,
    RepairRecord,
)
