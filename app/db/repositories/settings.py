import json
from typing import Optional, List

from sqlalchemy import select

from app.core.errors import NotFoundError, ValidationError
from app.db.models import ChatbotSetting
from app.db.repositories.base import BaseRepository

# Settings whose value is one of a fixed set
SETTING_CHOICES = {
    "chatbot_status": ("active", "inactive"),
}


def validate_setting_value(setting: ChatbotSetting, value: Optional[str]) -> str:
    """Check a new value against the setting's declared type; returns it unchanged."""
    key = setting.setting_key
    if value is None:
        raise ValidationError(f"Setting {key} requires a value")

    if setting.setting_type == "number":
        try:
            float(value)
        except ValueError:
            raise ValidationError(f"Setting {key} must be a number")
    elif setting.setting_type == "boolean":
        if value.lower() not in ("true", "false"):
            raise ValidationError(f"Setting {key} must be true or false")
    elif setting.setting_type == "json":
        try:
            json.loads(value)
        except ValueError:
            raise ValidationError(f"Setting {key} must be valid JSON")

    choices = SETTING_CHOICES.get(key)
    if choices and value not in choices:
        raise ValidationError(f"Setting {key} must be one of: {', '.join(choices)}")
    return value


class SettingsRepository(BaseRepository):
    async def list_settings(self) -> List[ChatbotSetting]:
        async with self._store_call("settings listing"):
            result = await self.db.execute(
                select(ChatbotSetting).order_by(ChatbotSetting.setting_key)
            )
            return list(result.scalars().all())

    async def get_setting(self, key: str) -> Optional[ChatbotSetting]:
        async with self._store_call("setting lookup"):
            result = await self.db.execute(
                select(ChatbotSetting).filter(ChatbotSetting.setting_key == key)
            )
            return result.scalars().first()

    async def get_value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        setting = await self.get_setting(key)
        if setting is None or setting.setting_value is None:
            return default
        return setting.setting_value

    async def update_value(self, key: str, value: Optional[str]) -> ChatbotSetting:
        setting = await self.get_setting(key)
        if setting is None:
            raise NotFoundError(f"Unknown setting: {key}")
        validate_setting_value(setting, value)
        async with self._store_call("setting update"):
            setting.setting_value = value
            await self.db.commit()
            await self.db.refresh(setting)
        return setting

    async def add_missing(self, defaults: List[dict]) -> int:
        """Insert default settings whose key is not present yet"""
        async with self._store_call("settings seed"):
            result = await self.db.execute(select(ChatbotSetting.setting_key))
            existing = set(result.scalars().all())
            missing = [ChatbotSetting(**d) for d in defaults if d["setting_key"] not in existing]
            self.db.add_all(missing)
            await self.db.commit()
        return len(missing)
