"""Build dist/feed-smartnews.xml from the origin feed (see smartfeed.build_smartnews)."""

from smartfeed.build_smartnews import run


if __name__ == "__main__":
    run()
