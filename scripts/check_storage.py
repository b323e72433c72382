# scripts/check_storage.py
from moltly.config import database_url, uploads_dir
from moltly.services.storage.store import get_store

store = get_store()
print("database", database_url())
print("attachments", store.backend)
if store.backend == "s3":
    print("bucket", store.settings.bucket, "->", store.base_url)
else:
    print("uploads", uploads_dir())
