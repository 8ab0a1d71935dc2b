"""CRUD operations for `Allergy` model."""

from maternacare.crud.base import CRUDBase
from maternacare.models.allergy import Allergy
from maternacare.schemas.allergy import AllergyCreate


class CRUDAllergy(CRUDBase[Allergy, AllergyCreate, AllergyCreate]):
    pass


# Singleton instance
crud_allergy = CRUDAllergy(Allergy)
