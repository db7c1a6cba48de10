"""
AWS integrations: Cognito identity, S3 blob storage, Secrets Manager.
"""
from app.aws.client import get_aws_client
from app.aws.cognito import CognitoIdentityProviderWrapper
from app.aws.s3 import delete_from_s3, download_from_s3, upload_to_s3

__all__ = [
    "get_aws_client",
    "CognitoIdentityProviderWrapper",
    "upload_to_s3",
    "download_from_s3",
    "delete_from_s3",
]
