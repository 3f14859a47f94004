"""DroneDeploy Annotation Uploader.

Parses geospatial annotation files (CSV, GeoJSON, KML, KMZ), normalizes
each record into a canonical ``Annotation``, optionally snaps colors to
the DroneDeploy palette, and pushes the result to the DroneDeploy
GraphQL API.
"""

__version__ = "0.1.0"
