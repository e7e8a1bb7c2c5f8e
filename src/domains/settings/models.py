"""User and notification settings, with the defaults new accounts start from."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = False
    alerts: bool = True


class SecuritySettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    two_factor_enabled: bool = Field(default=False, alias="twoFactorEnabled")
    session_timeout: int = Field(default=30, ge=1, le=1440, alias="sessionTimeout")


class DisplayPreferences(BaseModel):
    theme: str = "system"
    language: str = "en"


class ApiPreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    default_rate_limit: int = Field(default=60, ge=1, alias="defaultRateLimit")
    webhooks_enabled: bool = Field(default=False, alias="webhooksEnabled")


class UserSettingsModel(BaseModel):
    notification_preferences: NotificationPreferences = Field(
        default_factory=NotificationPreferences
    )
    security_settings: SecuritySettings = Field(default_factory=SecuritySettings)
    display_preferences: DisplayPreferences = Field(default_factory=DisplayPreferences)
    api_preferences: ApiPreferences = Field(default_factory=ApiPreferences)
    updated_at: datetime | None = None


class UserSettingsUpdate(BaseModel):
    """Partial update; each section present replaces that section."""

    notification_preferences: NotificationPreferences | None = None
    security_settings: SecuritySettings | None = None
    display_preferences: DisplayPreferences | None = None
    api_preferences: ApiPreferences | None = None


DEFAULT_ALERT_TYPES = ["high_risk", "sanctions", "api_limit"]


class NotificationSettingsModel(BaseModel):
    alert_types: list[str] = Field(default_factory=lambda: list(DEFAULT_ALERT_TYPES))
    email_notifications: bool = True
    push_notifications: bool = False
    webhook_url: str | None = None
    updated_at: datetime | None = None


class NotificationSettingsUpdate(BaseModel):
    alert_types: list[str] | None = None
    email_notifications: bool | None = None
    push_notifications: bool | None = None
    webhook_url: HttpUrl | None = None
