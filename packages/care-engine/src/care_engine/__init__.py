"""Care engine core package."""

from care_engine.catalog import clamp_page, coerce_number, derive_facet_options, query_catalog
from care_engine.models import (
    Address,
    AppointmentStatus,
    FacetOptions,
    FacetState,
    GeoPoint,
    PriceRange,
    Product,
    Provider,
    RegistrationCount,
    RegistrationPoint,
    SortKey,
    StatusCount,
    TimestampedRecord,
    TrendPoint,
)
from care_engine.search import ADMIN_SEARCH_FIELDS, filter_records
from care_engine.symptoms import DEFAULT_SYMPTOM_KEYWORDS, SymptomClassifier, classify_symptoms
from care_engine.trend import aggregate_status_counts, aggregate_trend, registration_trend, status_distribution

__all__ = [
    "ADMIN_SEARCH_FIELDS",
    "Address",
    "AppointmentStatus",
    "DEFAULT_SYMPTOM_KEYWORDS",
    "FacetOptions",
    "FacetState",
    "GeoPoint",
    "PriceRange",
    "Product",
    "Provider",
    "RegistrationCount",
    "RegistrationPoint",
    "SortKey",
    "StatusCount",
    "SymptomClassifier",
    "TimestampedRecord",
    "TrendPoint",
    "aggregate_status_counts",
    "aggregate_trend",
    "clamp_page",
    "classify_symptoms",
    "coerce_number",
    "derive_facet_options",
    "filter_records",
    "query_catalog",
    "registration_trend",
    "status_distribution",
]
