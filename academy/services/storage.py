import time

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from werkzeug.utils import secure_filename

from .errors import StorageError


def s3_client():
    # endpoint_url may be empty on AWS-managed S3
    s3_kwargs = {}
    endpoint = current_app.config.get('S3_ENDPOINT')
    if endpoint:
        s3_kwargs['endpoint_url'] = endpoint
    region = current_app.config.get('AWS_S3_REGION')
    if region:
        s3_kwargs['region_name'] = region
    # explicit keys are optional; otherwise boto3 resolves the usual credential chain
    if current_app.config.get('S3_ACCESS_KEY'):
        s3_kwargs['aws_access_key_id'] = current_app.config['S3_ACCESS_KEY']
        s3_kwargs['aws_secret_access_key'] = current_app.config.get('S3_SECRET_KEY')

    s3_config = Config(signature_version='s3v4', s3={'addressing_style': 'virtual'})
    return boto3.client('s3', config=s3_config, **s3_kwargs)


def default_bucket():
    return current_app.config['S3_BUCKET']


def build_upload_key(user_id, file_name):
    filename = secure_filename(file_name) or 'upload'
    return f"uploads/{user_id}/{int(time.time() * 1000)}-{filename}"


def generate_upload_url(bucket, key, content_type, expires_in=None):
    """Return a presigned PUT url the browser uploads the training material to."""
    if expires_in is None:
        expires_in = current_app.config.get('UPLOAD_URL_EXPIRES', 3600)
    try:
        return s3_client().generate_presigned_url(
            'put_object',
            Params={'Bucket': bucket, 'Key': key, 'ContentType': content_type},
            ExpiresIn=expires_in,
        )
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"could not presign upload for {key}: {e}") from e


def download_bytes(bucket, key) -> bytes:
    try:
        obj = s3_client().get_object(Bucket=bucket, Key=key)
        return obj['Body'].read()
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"could not download s3://{bucket}/{key}: {e}") from e


def read_text(bucket, key) -> str:
    return download_bytes(bucket, key).decode('utf-8', errors='replace')
