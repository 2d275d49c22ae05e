import json
from typing import Dict, Optional

from botocore.exceptions import WaiterError

from tutorial_modules.aws_call import CallResult, is_not_found
from tutorial_modules.errors import AwsCommandError
from tutorial_modules.tutorial import Tutorial

TABLE_NAME = "Music"

SONGS = [
    {"Artist": {"S": "No One You Know"}, "SongTitle": {"S": "Call Me Today"},
     "AlbumTitle": {"S": "Somewhat Famous"}, "Awards": {"N": "1"}},
    {"Artist": {"S": "No One You Know"}, "SongTitle": {"S": "Howdy"},
     "AlbumTitle": {"S": "Somewhat Famous"}, "Awards": {"N": "2"}},
    {"Artist": {"S": "Acme Band"}, "SongTitle": {"S": "Happy Day"},
     "AlbumTitle": {"S": "Songs About Life"}, "Awards": {"N": "10"}},
    {"Artist": {"S": "Acme Band"}, "SongTitle": {"S": "PartiQL Rocks"},
     "AlbumTitle": {"S": "Another Album Title"}, "Awards": {"N": "8"}},
]


class DynamoDBTutorial(Tutorial):
    name = "dynamodb"
    title = "DynamoDB Getting Started Tutorial"
    log_file = "dynamodb-tutorial.log"

    def __init__(self, config, table_name: str = TABLE_NAME, **kwargs):
        self.table_name = table_name
        super().__init__(config, **kwargs)

    def provision(self) -> None:
        self.logger.info(f"Step 1: Creating {self.table_name} table in DynamoDB...")
        self.call(
            "dynamodb",
            "create_table",
            TableName=self.table_name,
            AttributeDefinitions=[
                {"AttributeName": "Artist", "AttributeType": "S"},
                {"AttributeName": "SongTitle", "AttributeType": "S"},
            ],
            KeySchema=[
                {"AttributeName": "Artist", "KeyType": "HASH"},
                {"AttributeName": "SongTitle", "KeyType": "RANGE"},
            ],
            BillingMode="PAY_PER_REQUEST",
            TableClass="STANDARD",
        ).unwrap()
        self.track("table", self.table_name)

        self.wait_for_state(
            self._table_status, "ACTIVE", max_attempts=60, interval=5, label=f"Table {self.table_name}"
        )

        self.logger.info(f"Enabling point-in-time recovery for the {self.table_name} table...")
        self.call(
            "dynamodb",
            "update_continuous_backups",
            TableName=self.table_name,
            PointInTimeRecoverySpecification={"PointInTimeRecoveryEnabled": True},
        ).unwrap()

        self.logger.info(f"Step 2: Writing data to the {self.table_name} table...")
        for item in SONGS:
            self.call("dynamodb", "put_item", TableName=self.table_name, Item=item).unwrap()
            self.logger.info(f"Added {item['Artist']['S']} - {item['SongTitle']['S']}")

        self.logger.info(f"Step 3: Reading data from the {self.table_name} table...")
        key = {"Artist": {"S": "Acme Band"}, "SongTitle": {"S": "Happy Day"}}
        item = self.call("dynamodb", "get_item", TableName=self.table_name, Key=key, ConsistentRead=True).unwrap()
        self.logger.info(f"Retrieved item: {json.dumps(item.get('Item', {}))}")

        self.logger.info(f"Step 4: Updating data in the {self.table_name} table...")
        updated = self.call(
            "dynamodb",
            "update_item",
            TableName=self.table_name,
            Key=key,
            UpdateExpression="SET AlbumTitle = :newval",
            ExpressionAttributeValues={":newval": {"S": "Updated Album Title"}},
            ReturnValues="ALL_NEW",
        ).unwrap()
        self.logger.info(f"Updated item: {json.dumps(updated.get('Attributes', {}))}")

        self.logger.info(f"Step 5: Querying data in the {self.table_name} table...")
        result = self.call(
            "dynamodb",
            "query",
            TableName=self.table_name,
            KeyConditionExpression="Artist = :name",
            ExpressionAttributeValues={":name": {"S": "Acme Band"}},
        ).unwrap()
        self.logger.info(f"Query returned {result.get('Count', 0)} item(s)")

    def _table_status(self) -> Optional[str]:
        result = self.call("dynamodb", "describe_table", TableName=self.table_name)
        if is_not_found(result.error):
            return None
        return result.unwrap()["Table"]["TableStatus"]

    def deleters(self) -> Dict:
        return {"table": self._delete_table}

    def _delete_table(self, table_name: str) -> CallResult:
        result = self.call("dynamodb", "delete_table", TableName=table_name)
        if not result.ok:
            return result
        self.logger.info("Waiting for table deletion to complete...")
        try:
            self.client("dynamodb").get_waiter("table_not_exists").wait(TableName=table_name)
        except WaiterError as e:
            return CallResult("delete_table", error=AwsCommandError("table_not_exists", "WaiterError", str(e)))
        return result

    def manual_cleanup_commands(self) -> Dict:
        return {"table": f"aws dynamodb delete-table --table-name {{identifier}} --region {self.region}"}
