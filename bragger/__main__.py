import uvicorn

from bragger.config import settings

if __name__ == "__main__":
    uvicorn.run("bragger.main:app", host="0.0.0.0", port=settings.PORT)
