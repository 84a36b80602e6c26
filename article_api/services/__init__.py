# Services package.
#
#   article_store: persistence for the Article entity (create, list, update)
#
# Store objects are constructed once by the application factory with a
# session factory and shared by every request.  Each call opens and closes
# its own session, so no connection is held between calls.
