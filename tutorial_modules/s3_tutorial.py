import os
from typing import Dict, List

from tutorial_modules.aws_call import CallResult
from tutorial_modules.tutorial import Tutorial

SAMPLE_BODY = b"This is a sample file for the S3 tutorial.\n"
DOCUMENT_BODY = b"This is a document with metadata.\n"


class S3Tutorial(Tutorial):
    name = "s3"
    title = "Amazon S3 Getting Started Tutorial"
    log_file = "s3-tutorial.log"

    def __init__(self, config, **kwargs):
        super().__init__(config, **kwargs)
        self.bucket_name = f"demo-s3-bucket-{self.resource_suffix(6)}"
        self.download_path = os.path.join(config.log_dir, "downloaded-sample-file.txt")

    def provision(self) -> None:
        self.logger.info(f"Step 1: Creating S3 bucket {self.bucket_name}...")
        create_args = {"Bucket": self.bucket_name}
        if self.region != "us-east-1":
            create_args["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        self.call("s3", "create_bucket", **create_args).unwrap()
        self.track("bucket", self.bucket_name)
        self._configure_bucket()

        self.logger.info("Step 2: Uploading objects to bucket...")
        self.call("s3", "put_object", Bucket=self.bucket_name, Key="sample-file.txt", Body=SAMPLE_BODY).unwrap()
        self.call(
            "s3",
            "put_object",
            Bucket=self.bucket_name,
            Key="documents/sample-document.txt",
            Body=DOCUMENT_BODY,
            ContentType="text/plain",
            Metadata={"author": "AWSDocumentation", "purpose": "tutorial"},
        ).unwrap()

        self.logger.info("Step 3: Downloading object from bucket...")
        response = self.call("s3", "get_object", Bucket=self.bucket_name, Key="sample-file.txt").unwrap()
        with open(self.download_path, "wb") as f:
            f.write(response["Body"].read())
        self.track("local_file", self.download_path)
        self.call("s3", "head_object", Bucket=self.bucket_name, Key="sample-file.txt").unwrap()
        self.logger.info("Object exists")

        self.logger.info("Step 4: Copying object to a folder...")
        self.call("s3", "put_object", Bucket=self.bucket_name, Key="favorite-files/", Body=b"").unwrap()
        self.call(
            "s3",
            "copy_object",
            Bucket=self.bucket_name,
            CopySource={"Bucket": self.bucket_name, "Key": "sample-file.txt"},
            Key="favorite-files/sample-file.txt",
        ).unwrap()

        for key in self._list_keys():
            self.logger.info(f"  {key}")
        self.logger.info("Listing objects in the favorite-files folder...")
        for key in self._list_keys(prefix="favorite-files/"):
            self.logger.info(f"  {key}")

        self.logger.info("Adding tags to the bucket...")
        self.call(
            "s3",
            "put_bucket_tagging",
            Bucket=self.bucket_name,
            Tagging={"TagSet": [{"Key": "Project", "Value": "S3Tutorial"}, {"Key": "Environment", "Value": "Demo"}]},
        ).unwrap()

    def _configure_bucket(self) -> None:
        self.logger.info("Blocking public access...")
        self.call(
            "s3",
            "put_public_access_block",
            Bucket=self.bucket_name,
            PublicAccessBlockConfiguration={
                "BlockPublicAcls": True,
                "IgnorePublicAcls": True,
                "BlockPublicPolicy": True,
                "RestrictPublicBuckets": True,
            },
        ).unwrap()
        self.logger.info("Enabling versioning...")
        self.call(
            "s3", "put_bucket_versioning", Bucket=self.bucket_name, VersioningConfiguration={"Status": "Enabled"}
        ).unwrap()
        self.logger.info("Setting default encryption...")
        self.call(
            "s3",
            "put_bucket_encryption",
            Bucket=self.bucket_name,
            ServerSideEncryptionConfiguration={
                "Rules": [{"ApplyServerSideEncryptionByDefault": {"SSEAlgorithm": "AES256"}}]
            },
        ).unwrap()

    def _list_keys(self, prefix: str = "") -> List[str]:
        objects = self.paginate("s3", "list_objects_v2", "Contents", Bucket=self.bucket_name, Prefix=prefix)
        return [obj["Key"] for obj in objects]

    def deleters(self) -> Dict:
        return {"bucket": self._delete_bucket, "local_file": self._delete_local_file}

    def _delete_bucket(self, bucket_name: str) -> CallResult:
        self.logger.info(f"Deleting all object versions from bucket {bucket_name}...")
        paginator = self.client("s3").get_paginator("list_object_versions")
        for page in paginator.paginate(Bucket=bucket_name):
            entries = page.get("Versions", []) + page.get("DeleteMarkers", [])
            objects = [{"Key": entry["Key"], "VersionId": entry["VersionId"]} for entry in entries]
            if objects:
                result = self.call("s3", "delete_objects", Bucket=bucket_name, Delete={"Objects": objects})
                if not result.ok:
                    self.logger.warning(f"Some versions could not be deleted: {result.error}")
        return self.call("s3", "delete_bucket", Bucket=bucket_name)

    @staticmethod
    def _delete_local_file(path: str) -> None:
        os.remove(path)

    def manual_cleanup_commands(self) -> Dict:
        return {
            "bucket": "aws s3 rb s3://{identifier} --force",
            "local_file": "rm -f {identifier}",
        }
