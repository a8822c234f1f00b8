from pydantic import BaseModel, Field


class DriveSettingsPatchRequest(BaseModel):
    syncFolderPath: str | None = Field(default=None, min_length=1, max_length=1024)
    autoAnalyze: bool | None = None
    autoGenerate: bool | None = None
    autoApprove: bool | None = None
    isActive: bool | None = None

    def to_columns(self) -> dict:
        mapping = {
            "syncFolderPath": "sync_folder_path",
            "autoAnalyze": "auto_analyze",
            "autoGenerate": "auto_generate",
            "autoApprove": "auto_approve",
            "isActive": "is_active",
        }
        data = self.model_dump(exclude_none=True)
        return {mapping[key]: value for key, value in data.items()}
