from typing import Any, Optional
from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

# Documents come back from the driver with bson ids
BSON_ENCODERS = {ObjectId: str}

class ResponseModel(BaseModel):
    code: int = 200
    message: str = "success"
    data: Optional[Any] = None

    @staticmethod
    def success(data: Any = None):
        return {"code": 200, "message": "success", "data": jsonable_encoder(data, custom_encoder=BSON_ENCODERS)}

    @staticmethod
    def fail(code: int = 400, message: str = "error", data: Any = None):
        return {"code": code, "message": message, "data": jsonable_encoder(data, custom_encoder=BSON_ENCODERS)}
