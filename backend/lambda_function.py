from main import handler


def lambda_handler(event, context):
    """AWS Lambda entry point; the schema is managed by alembic, not at startup"""
    return handler(event, context)
