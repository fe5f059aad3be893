"""Пересчитать likes_count/dislikes_count комментариев по голосам.

    python -m scripts.reconcile_counters [--dry-run]
"""
import sys

from pymongo import MongoClient
from catalog_api.core.config import settings


def main(dry_run: bool = False):
    db = MongoClient(settings.mongo_dsn)[settings.mongo_db]
    votes = db["comment_votes"]
    comments = db["comments"]

    # фактические счётчики по таблице голосов
    pipeline = [
        {"$group": {"_id": "$comment_id",
                    "likes": {"$sum": {"$cond": ["$is_like", 1, 0]}},
                    "dislikes": {"$sum": {"$cond": ["$is_like", 0, 1]}}}},
    ]
    actual = {d["_id"]: d for d in votes.aggregate(pipeline)}

    fixed = 0
    for c in comments.find({}, {"likes_count": 1, "dislikes_count": 1}):
        a = actual.get(str(c["_id"]), {"likes": 0, "dislikes": 0})
        if (c.get("likes_count", 0), c.get("dislikes_count", 0)) == \
                (a["likes"], a["dislikes"]):
            continue
        print(f"  {c['_id']}: {c.get('likes_count')}/"
              f"{c.get('dislikes_count')} -> {a['likes']}/{a['dislikes']}")
        if not dry_run:
            comments.update_one(
                {"_id": c["_id"]},
                {"$set": {"likes_count": a["likes"],
                          "dislikes_count": a["dislikes"]}})
        fixed += 1

    print(f"Drifted comments: {fixed}" + (" (dry run)" if dry_run else ""))


if __name__ == "__main__":
    main(dry_run="--dry-run" in sys.argv)
