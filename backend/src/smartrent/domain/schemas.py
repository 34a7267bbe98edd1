"""Pydantic request / response schemas for the SmartRent API."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Schema for local (password) registration."""

    username: str
    email: str
    password: str
    role: str = "tenant"
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    landlord_id: str | None = None


class UserLogin(BaseModel):
    """Schema for user login."""

    email: str
    password: str


class FirebaseRegister(BaseModel):
    """Profile data sent alongside a verified Firebase ID token."""

    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    role: str | None = None
    landlord_code: str | None = None


class UserResponse(BaseModel):
    """Schema for user API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    username: str | None = None
    role: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    landlord_id: str | None = None
    created_at: datetime | None = None


class UserUpdate(BaseModel):
    """Schema for updating the caller's own profile."""

    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class TokenResponse(BaseModel):
    """Schema for JWT token responses."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ---------------------------------------------------------------------------
# Property
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    title: str
    address: str
    description: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    property_type: str = "apartment"
    bedrooms: int = 0
    bathrooms: float = 0
    square_feet: int = 0
    rent_amount: float = 0
    status: str = "available"


class PropertyUpdate(BaseModel):
    title: str | None = None
    address: str | None = None
    description: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    property_type: str | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: int | None = None
    rent_amount: float | None = None
    status: str | None = None


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    landlord_id: str
    title: str
    description: str | None = None
    address: str
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    property_type: str
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: int | None = None
    rent_amount: float | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Lease
# ---------------------------------------------------------------------------


class LeaseCreate(BaseModel):
    """Lease creation payload.

    Numeric fields are accepted as numbers or strings and coerced by the
    lease service, mirroring the permissive parsing of the web client.
    """

    property_id: str | int | None = None
    tenant_id: str | int | None = None
    start_date: str | None = None
    end_date: str | None = None
    monthly_rent: float | str | None = None
    security_deposit: float | str | None = None
    utilities_cost: float | str | None = None
    payment_due_day: int | str | None = None
    status: str | None = None  # ignored: leases always start pending
    notes: str | None = None


class LeaseStatusUpdate(BaseModel):
    status: str


class LeaseResponse(BaseModel):
    """Lease record enriched with property and tenant display fields."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    property_id: str
    tenant_id: str
    landlord_id: str
    start_date: date
    end_date: date
    monthly_rent: float
    security_deposit: float | None = None
    utilities_cost: float | None = None
    payment_due_day: int
    status: str
    notes: str | None = None
    move_out_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    property_title: str | None = None
    property_address: str | None = None
    tenant_name: str | None = None
    tenant_email: str | None = None


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------


class MaintenanceCreate(BaseModel):
    """Maintenance request filed by a tenant. Presence of the text fields is checked by the service."""

    property_id: str | None = None
    title: str | None = None
    description: str | None = None
    category: str | None = None
    priority: str | None = None


class MaintenanceUpdate(BaseModel):
    """Partial update. Tenants may change the first four fields, landlords the rest plus priority."""

    title: str | None = None
    description: str | None = None
    category: str | None = None
    priority: str | None = None
    status: str | None = None
    assigned_to: str | None = None
    estimated_cost: float | None = None
    actual_cost: float | None = None
    scheduled_date: date | None = None
    completed_date: date | None = None
    notes: str | None = None


class MaintenanceResponse(BaseModel):
    """Maintenance request enriched with property and party display fields."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    property_id: str
    tenant_id: str
    landlord_id: str
    title: str
    description: str
    category: str
    priority: str
    status: str
    assigned_to: str | None = None
    estimated_cost: float | None = None
    actual_cost: float | None = None
    scheduled_date: date | None = None
    completed_date: date | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    property_title: str | None = None
    property_address: str | None = None
    tenant_name: str | None = None
    landlord_name: str | None = None


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
