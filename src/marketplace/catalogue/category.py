"""Reference data for browsing: product categories and district (GI) categories."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import List, String, Text

from marketplace.domain import marketplace

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(name):
    return re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")


@marketplace.aggregate
class ProductCategory:
    name: String(required=True, max_length=100)
    slug: String(required=True, max_length=120)
    description: Text()

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not _SLUG_PATTERN.match(self.slug):
            raise ValidationError({"slug": ["Slug must contain only lowercase letters, digits and single hyphens"]})


@marketplace.aggregate
class DistrictCategory:
    """A district and the GI brand its crafts are sold under."""

    district: String(required=True, max_length=100)
    gi_brand: String(required=True, max_length=100)
    crafts: List(String(max_length=100))
