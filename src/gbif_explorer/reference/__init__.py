"""Static reference data.

Reference data that doesn't change with API calls: predefined regions,
region selection ids, taxon presets and filter enums.

Adding a new module:
1. Create ``reference/{name}.py`` with constants/dataclasses
2. Re-export from this ``__init__.py``
"""

from gbif_explorer.reference.geography import REGION_ID_CURRENT_VIEW as REGION_ID_CURRENT_VIEW
from gbif_explorer.reference.geography import REGION_ID_DRAWN as REGION_ID_DRAWN
from gbif_explorer.reference.geography import REGION_ID_PLACE as REGION_ID_PLACE
from gbif_explorer.reference.geography import REGIONS as REGIONS
from gbif_explorer.reference.geography import Region as Region
from gbif_explorer.reference.geography import get_region as get_region
from gbif_explorer.reference.geography import get_region_bounds as get_region_bounds
from gbif_explorer.reference.taxa import CONTINENTS as CONTINENTS
from gbif_explorer.reference.taxa import IUCN_CATEGORIES as IUCN_CATEGORIES
from gbif_explorer.reference.taxa import TAXON_CLASS_KEYS as TAXON_CLASS_KEYS
