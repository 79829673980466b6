from pydantic import BaseModel


class AccountDeleted(BaseModel):
    message: str = "Account deleted successfully"
