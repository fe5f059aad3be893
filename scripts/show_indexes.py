from pymongo import MongoClient
from catalog_api.core.config import settings

COLLECTIONS = ("comments", "comment_votes", "ratings", "watchlist")


def dump(db, col_name: str):
    print(f"\nIndexes in '{col_name}':")
    for i in db[col_name].list_indexes():
        print(" -", i["name"], dict(i["key"]),
              "unique" if i.get("unique") else "")


if __name__ == "__main__":
    database = MongoClient(settings.mongo_dsn)[settings.mongo_db]
    for name in COLLECTIONS:
        dump(database, name)
