"""
ebdeploy - Package a project directory and deploy it to AWS Elastic Beanstalk.

This package provides a CLI that zips the configured project files, uploads
the archive to S3 and activates it as a new application version.
"""

__version__ = "0.1.0"
