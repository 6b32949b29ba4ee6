from sqlalchemy import MetaData

# Metric tables are created per import target at runtime, so they are
# registered on this metadata by name rather than declared as classes.
metadata = MetaData()
