from .build_smartnews import run

run()
