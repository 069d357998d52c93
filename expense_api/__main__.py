import uvicorn

from expense_api.core.config import settings

if __name__ == "__main__":
    uvicorn.run("expense_api.main:app", host="0.0.0.0", port=settings.PORT)
