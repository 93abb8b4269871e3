# Import all models once to ensure SQLAlchemy mapper registry is fully populated.
# This prevents late-binding issues for relationship("ClassName").

from .users.models import User  # noqa: F401
from .categories.models import Category  # noqa: F401
from .tags.models import Tag  # noqa: F401
from .articles.models import Article, article_tags  # noqa: F401
from .magazine_issues.models import MagazineIssue  # noqa: F401
