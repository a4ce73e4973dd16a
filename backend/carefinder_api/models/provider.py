"""Normalized provider models"""

from enum import Enum
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProviderCategory(str, Enum):
    """Facility categories, listed in derivation priority order"""
    HOSPITAL = "Hospital"
    DOCTOR = "Doctor"
    CLINIC = "Clinic"
    PHARMACY = "Pharmacy"
    DENTIST = "Dentist"
    LABORATORY = "Laboratory"
    HEALTHCARE_PROVIDER = "Healthcare Provider"


class ApiModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either spelling on input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Photo(ApiModel):
    """Photo reference as returned by the Places API"""
    model_config = ConfigDict(frozen=True)

    reference: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class Provider(ApiModel):
    """Normalized medical facility record.

    Built per request from a Places result or a store row; never mutated,
    always replaced wholesale.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[Union[int, str]] = None
    place_id: Optional[str] = None
    name: str = "Unknown Provider"
    address: str = ""
    lat: float
    lng: float
    category: ProviderCategory = Field(default=ProviderCategory.HEALTHCARE_PROVIDER, alias="type")
    rating: float
    phone_number: Optional[str] = ""
    website: Optional[str] = ""
    open_now: bool = True
    price_level: int
    review_count: int
    photos: List[Photo] = Field(default_factory=list)
