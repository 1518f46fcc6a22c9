# pixlee_export/models/base.py
from pydantic import BaseModel, ConfigDict


class PixleeModel(BaseModel):
    """Base model for host data and Pixlee payloads"""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
