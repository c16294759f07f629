"""
bucketctl - Facet controllers for S3 bucket sub-resources.

Drives independent bucket facets (access logging, default encryption)
toward a declared desired state with a shared observe/apply/delete protocol.
"""

__version__ = "0.1.0"
