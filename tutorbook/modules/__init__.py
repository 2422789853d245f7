"""Domain modules package."""

from tutorbook.modules.audit import models as audit_models  # noqa: F401
from tutorbook.modules.availability import models as availability_models  # noqa: F401
from tutorbook.modules.booking import models as booking_models  # noqa: F401
from tutorbook.modules.identity import models as identity_models  # noqa: F401
from tutorbook.modules.teachers import models as teachers_models  # noqa: F401
