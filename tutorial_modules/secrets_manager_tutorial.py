import json
from typing import Dict

from tutorial_modules.aws_call import CallResult
from tutorial_modules.tutorial import Tutorial

READ_WRITE_POLICY_ARN = "arn:aws:iam::aws:policy/SecretsManagerReadWrite"
IAM_PROPAGATION_SECONDS = 10

EC2_TRUST_POLICY = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Effect": "Allow",
            "Principal": {"Service": "ec2.amazonaws.com"},
            "Action": "sts:AssumeRole",
        }
    ],
}


class SecretsManagerTutorial(Tutorial):
    """Move a hardcoded API key into Secrets Manager.

    Creates an admin role and a runtime role, stores the secret, restricts
    ``GetSecretValue`` to the runtime role and then reads and rotates the
    value by hand.
    """

    name = "secrets-manager"
    title = "AWS Secrets Manager tutorial"
    log_file = "secrets_manager_tutorial.log"

    def __init__(self, config, **kwargs):
        super().__init__(config, **kwargs)
        self.admin_role_name = f"SecretsManagerAdmin-sm{self.resource_suffix()}"
        self.runtime_role_name = f"RoleToRetrieveSecretAtRuntime-sm{self.resource_suffix()}"
        self.secret_name = f"MyAPIKey-sm{self.resource_suffix()}"

    def provision(self) -> None:
        self.logger.info(f"Admin Role: {self.admin_role_name}")
        self.logger.info(f"Runtime Role: {self.runtime_role_name}")
        self.logger.info(f"Secret Name: {self.secret_name}")

        self.logger.info("Step 1: Creating IAM roles...")
        self._create_role(self.admin_role_name)
        self.call(
            "iam", "attach_role_policy", RoleName=self.admin_role_name, PolicyArn=READ_WRITE_POLICY_ARN
        ).unwrap()
        self.track("role_policy", f"{self.admin_role_name}|{READ_WRITE_POLICY_ARN}")
        self._create_role(self.runtime_role_name)

        self.logger.info("Waiting for IAM roles to be fully created...")
        self.sleep(IAM_PROPAGATION_SECONDS)

        self.logger.info("Step 2: Creating secret in AWS Secrets Manager...")
        self.call(
            "secretsmanager",
            "create_secret",
            Name=self.secret_name,
            Description="API key for my application",
            SecretString=json.dumps(
                {"ClientID": "my_client_id", "ClientSecret": "wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY"}
            ),
        ).unwrap()
        self.track("secret", self.secret_name)

        account_id = self.call("sts", "get_caller_identity").unwrap()["Account"]
        self.logger.info(f"Account ID: {account_id}")

        self.logger.info("Adding resource policy to secret...")
        resource_policy = {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"AWS": f"arn:aws:iam::{account_id}:role/{self.runtime_role_name}"},
                    "Action": "secretsmanager:GetSecretValue",
                    "Resource": "*",
                }
            ],
        }
        self.call(
            "secretsmanager",
            "put_resource_policy",
            SecretId=self.secret_name,
            ResourcePolicy=json.dumps(resource_policy),
            BlockPublicPolicy=True,
        ).unwrap()

        self.logger.info("Step 3: Retrieving the secret value (for demonstration purposes)...")
        self._log_secret_metadata()

        self.logger.info("Step 4: Updating the secret with new values...")
        self.call(
            "secretsmanager",
            "update_secret",
            SecretId=self.secret_name,
            SecretString=json.dumps(
                {"ClientID": "my_new_client_id", "ClientSecret": "bPxRfiCYEXAMPLEKEY/wJalrXUtnFEMI/K7MDENG"}
            ),
        ).unwrap()

        self.logger.info("Step 5: Verifying the updated secret...")
        self._log_secret_metadata()

    def _create_role(self, role_name: str) -> None:
        self.logger.info(f"Creating role: {role_name}")
        self.call(
            "iam", "create_role", RoleName=role_name, AssumeRolePolicyDocument=json.dumps(EC2_TRUST_POLICY)
        ).unwrap()
        self.track("iam_role", role_name)

    def _log_secret_metadata(self) -> None:
        secret = self.call("secretsmanager", "get_secret_value", SecretId=self.secret_name).unwrap()
        # never log the value itself
        metadata = {key: value for key, value in secret.items() if key in ("ARN", "Name", "VersionId")}
        self.logger.info(f"Secret retrieved successfully. Secret metadata: {metadata}")

    def deleters(self) -> Dict:
        return {
            "secret": lambda name: self.call(
                "secretsmanager", "delete_secret", SecretId=name, ForceDeleteWithoutRecovery=True
            ),
            "iam_role": lambda name: self.call("iam", "delete_role", RoleName=name),
            "role_policy": self._detach_policy,
        }

    def _detach_policy(self, identifier: str) -> CallResult:
        role_name, policy_arn = identifier.split("|", 1)
        return self.call("iam", "detach_role_policy", RoleName=role_name, PolicyArn=policy_arn)

    def manual_cleanup_commands(self) -> Dict:
        def detach_command(identifier: str) -> str:
            role_name, policy_arn = identifier.split("|", 1)
            return f"aws iam detach-role-policy --role-name {role_name} --policy-arn {policy_arn}"

        return {
            "secret": (
                "aws secretsmanager delete-secret --secret-id {identifier} --force-delete-without-recovery"
                f" --region {self.region}"
            ),
            "iam_role": "aws iam delete-role --role-name {identifier}",
            "role_policy": detach_command,
        }
