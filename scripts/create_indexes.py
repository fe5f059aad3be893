from pymongo import MongoClient, ASCENDING, DESCENDING
from catalog_api.core.config import settings


def main():
    db = MongoClient(settings.mongo_dsn)[settings.mongo_db]

    print("Using DSN:", settings.mongo_dsn, "DB:", settings.mongo_db)

    # comments: сортировки по фильму (newest/likes/dislikes) + «мои»
    db["comments"].create_index(
        [("movie_id", ASCENDING), ("created_at", DESCENDING)],
        name="comments_movie_created_desc"
    )
    db["comments"].create_index(
        [("movie_id", ASCENDING),
         ("likes_count", DESCENDING),
         ("created_at", DESCENDING)],
        name="comments_movie_likes_desc"
    )
    db["comments"].create_index(
        [("movie_id", ASCENDING),
         ("dislikes_count", DESCENDING),
         ("created_at", DESCENDING)],
        name="comments_movie_dislikes_desc"
    )
    db["comments"].create_index(
        [("username", ASCENDING), ("created_at", DESCENDING)],
        name="comments_username_created_desc"
    )

    # comment_votes: один голос на пару, на этом держится счётчик
    db["comment_votes"].create_index(
        [("comment_id", ASCENDING), ("username", ASCENDING)],
        unique=True, name="comment_votes_comment_user"
    )

    # ratings
    db["ratings"].create_index(
        [("movie_id", ASCENDING), ("username", ASCENDING)],
        unique=True, name="ratings_movie_user"
    )
    db["ratings"].create_index(
        [("username", ASCENDING), ("updated_at", DESCENDING)],
        name="ratings_username_updated_desc"
    )

    # watchlist
    db["watchlist"].create_index(
        [("username", ASCENDING), ("movie_id", ASCENDING)],
        unique=True, name="watchlist_user_movie"
    )
    db["watchlist"].create_index(
        [("username", ASCENDING), ("created_at", DESCENDING)],
        name="watchlist_user_created_desc"
    )

    print("Indexes ensured.")


if __name__ == "__main__":
    main()
