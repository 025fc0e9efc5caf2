"""Category repository."""

from inkblog.models import CategoryDB
from inkblog.repositories.base import NamedRepository


class CategoryRepository(NamedRepository[CategoryDB]):
    model = CategoryDB
