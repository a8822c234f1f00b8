from socialops.tenants.models import Tenant  # noqa: F401
from socialops.auth.models import User  # noqa: F401
from socialops.team.models import Invitation  # noqa: F401
from socialops.billing.models import PricingPlan, Subscription  # noqa: F401
from socialops.integrations.models import CloudStorageIntegration, LinkedInIntegration  # noqa: F401
from socialops.media.models import SyncedMedia  # noqa: F401
from socialops.posts.models import Post  # noqa: F401
