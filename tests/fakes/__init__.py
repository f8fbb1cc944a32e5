"""Hand-written fakes of boto3 and paramiko objects."""
