import base64
import os
from typing import Dict, Optional

from tutorial_modules.aws_call import CallResult, is_not_found
from tutorial_modules.tutorial import Tutorial

BLUEPRINT_ID = "amazon_linux_2023"
BUNDLE_ID = "nano_3_0"
DISK_PATH = "/dev/xvdf"
DISK_SIZE_GB = 8
DETACH_PAUSE_SECONDS = 10


class LightsailTutorial(Tutorial):
    """Instance, block storage disk and instance snapshot on Lightsail."""

    name = "lightsail"
    title = "Lightsail Getting Started"
    log_file = "lightsail-script.log"
    default_region = "us-west-2"

    def __init__(self, config, **kwargs):
        super().__init__(config, **kwargs)
        suffix = self.resource_suffix()
        self.instance_name = f"LightsailInstance-{suffix}"
        self.disk_name = f"LightsailDisk-{suffix}"
        self.snapshot_name = f"LightsailSnapshot-{suffix}"
        self.key_file = os.path.join(config.log_dir, f"lightsail_key_{suffix}.pem")
        self.availability_zone = f"{self.region}a"

    def provision(self) -> None:
        self._show_catalog()
        self._create_instance()
        self._download_key_pair()
        self._create_and_attach_disk()
        self._create_snapshot()

    def _show_catalog(self) -> None:
        self.logger.info("Step 1: Getting available blueprints and bundles")
        blueprints = self.call("lightsail", "get_blueprints").unwrap().get("blueprints", [])
        for blueprint in blueprints[:5]:
            self.logger.info(f"  blueprint {blueprint['blueprintId']}: {blueprint.get('name')}")
        bundles = self.call("lightsail", "get_bundles").unwrap().get("bundles", [])
        for bundle in bundles[:5]:
            self.logger.info(f"  bundle {bundle['bundleId']}: {bundle.get('name')} ({bundle.get('price')} USD)")

    def _create_instance(self) -> None:
        self.logger.info(f"Step 2: Creating Lightsail instance: {self.instance_name}")
        self.call(
            "lightsail",
            "create_instances",
            instanceNames=[self.instance_name],
            availabilityZone=self.availability_zone,
            blueprintId=BLUEPRINT_ID,
            bundleId=BUNDLE_ID,
        ).unwrap()
        self.track("instance", self.instance_name)

        self.wait_for_state(
            lambda: self._instance_state(self.instance_name),
            "running",
            max_attempts=30,
            interval=10,
            label=f"Instance {self.instance_name}",
        )

        instance = self.call("lightsail", "get_instance", instanceName=self.instance_name).unwrap()
        self.instance_ip = instance["instance"].get("publicIpAddress")
        self.logger.info(f"Instance IP address: {self.instance_ip}")

    def _download_key_pair(self) -> None:
        self.logger.info("Step 3: Downloading default key pair")
        key_pair = self.call("lightsail", "download_default_key_pair").unwrap()
        private_key = key_pair.get("privateKeyBase64", "")
        if private_key and not private_key.startswith("-----BEGIN"):
            private_key = base64.b64decode(private_key).decode()
        with open(self.key_file, "w") as f:
            f.write(private_key)
        os.chmod(self.key_file, 0o400)
        self.logger.info(f"Key pair downloaded to {self.key_file}")
        self.logger.info(f"To connect to your instance, use: ssh -i {self.key_file} ec2-user@{self.instance_ip}")

    def _create_and_attach_disk(self) -> None:
        self.logger.info(f"Step 4: Creating block storage disk: {self.disk_name}")
        self.call(
            "lightsail",
            "create_disk",
            diskName=self.disk_name,
            availabilityZone=self.availability_zone,
            sizeInGb=DISK_SIZE_GB,
        ).unwrap()
        self.track("disk", self.disk_name)

        self.wait_for_state(
            lambda: self._disk_state(self.disk_name),
            "available",
            max_attempts=30,
            interval=10,
            label=f"Disk {self.disk_name}",
        )

        self.logger.info("Attaching disk to instance")
        self.call(
            "lightsail",
            "attach_disk",
            diskName=self.disk_name,
            instanceName=self.instance_name,
            diskPath=DISK_PATH,
        ).unwrap()
        self.logger.info(f"Disk attached. Format and mount it with: sudo mkfs -t ext4 {DISK_PATH}")

    def _create_snapshot(self) -> None:
        self.logger.info(f"Step 5: Creating snapshot of the instance: {self.snapshot_name}")
        self.call(
            "lightsail",
            "create_instance_snapshot",
            instanceName=self.instance_name,
            instanceSnapshotName=self.snapshot_name,
        ).unwrap()
        self.track("instance_snapshot", self.snapshot_name)

        self.logger.info("Waiting for snapshot to complete... (this may take several minutes)")
        self.wait_for_state(
            lambda: self._snapshot_state(self.snapshot_name),
            "available",
            max_attempts=60,
            interval=10,
            label=f"Snapshot {self.snapshot_name}",
            required=False,
        )

    def _instance_state(self, name: str) -> Optional[str]:
        result = self.call("lightsail", "get_instance_state", instanceName=name)
        if is_not_found(result.error):
            return None
        return result.unwrap()["state"]["name"]

    def _disk_state(self, name: str) -> Optional[str]:
        result = self.call("lightsail", "get_disk", diskName=name)
        if is_not_found(result.error):
            return None
        return result.unwrap()["disk"]["state"]

    def _snapshot_state(self, name: str) -> Optional[str]:
        result = self.call("lightsail", "get_instance_snapshot", instanceSnapshotName=name)
        if is_not_found(result.error):
            return None
        return result.unwrap()["instanceSnapshot"]["state"]

    def deleters(self) -> Dict:
        return {
            "instance_snapshot": lambda name: self.call(
                "lightsail", "delete_instance_snapshot", instanceSnapshotName=name
            ),
            "disk_snapshot": lambda name: self.call("lightsail", "delete_disk_snapshot", diskSnapshotName=name),
            "disk": self._delete_disk,
            "instance": self._delete_instance,
        }

    def _delete_disk(self, name: str) -> CallResult:
        detach = self.call("lightsail", "detach_disk", diskName=name)
        if detach.ok:
            self.sleep(DETACH_PAUSE_SECONDS)
        else:
            self.logger.warning(f"Could not detach disk {name}: {detach.error}")
        return self.call("lightsail", "delete_disk", diskName=name)

    def _delete_instance(self, name: str) -> CallResult:
        if self._instance_state(name) == "pending":
            self.logger.info("Instance is in pending state. Waiting for it to be ready before deleting...")
            self.wait_for_state(
                lambda: self._instance_state(name),
                "running",
                max_attempts=30,
                interval=10,
                label=f"Instance {name}",
                required=False,
            )
        return self.call("lightsail", "delete_instance", instanceName=name)

    def manual_cleanup_commands(self) -> Dict:
        region = f"--region {self.region}"
        return {
            "instance_snapshot": f"aws lightsail delete-instance-snapshot --instance-snapshot-name {{identifier}} {region}",
            "disk_snapshot": f"aws lightsail delete-disk-snapshot --disk-snapshot-name {{identifier}} {region}",
            "disk": lambda name: (
                f"aws lightsail detach-disk --disk-name {name} {region} && "
                f"aws lightsail delete-disk --disk-name {name} {region}"
            ),
            "instance": f"aws lightsail delete-instance --instance-name {{identifier}} {region}",
        }
