from datetime import datetime
from typing import Dict, Optional

from tutorial_modules.tutorial import Tutorial

PENDING_CONFIRMATION = "pending confirmation"
DELIVERY_PAUSE_SECONDS = 10


class SNSTutorial(Tutorial):
    name = "sns"
    title = "Amazon SNS Getting Started Tutorial"
    log_file = "sns-tutorial.log"

    def __init__(self, config, **kwargs):
        super().__init__(config, **kwargs)
        self.topic_name = f"my-topic-{self.resource_suffix()}"
        self.topic_arn: Optional[str] = None

    def provision(self) -> None:
        self.logger.info(f"Creating SNS topic: {self.topic_name}")
        self.topic_arn = self.call("sns", "create_topic", Name=self.topic_name).unwrap()["TopicArn"]
        self.track("topic", self.topic_arn)

        email = self.config.email or self.input("Please enter your email address to subscribe to the topic: ")
        self.logger.info(f"Subscribing email: {email} to topic")
        subscription = self.call(
            "sns", "subscribe", TopicArn=self.topic_arn, Protocol="email", Endpoint=email
        ).unwrap()
        self.logger.info(f"Subscription created: {subscription.get('SubscriptionArn')}")
        self.logger.info(f"A confirmation email has been sent to {email}")
        self.input("Press Enter after you have confirmed the subscription to continue: ")

        subscription_arn = self._confirmed_subscription_arn()
        if subscription_arn:
            self.track("subscription", subscription_arn)
        else:
            self.logger.warning(
                "No confirmed subscription found. You may not have confirmed the subscription yet."
            )

        self.logger.info("Publishing a test message to the topic")
        message = f"Hello from Amazon SNS! This is a test message sent at {datetime.now():%Y-%m-%d %H:%M:%S}."
        published = self.call("sns", "publish", TopicArn=self.topic_arn, Message=message).unwrap()
        self.logger.info(f"Message published successfully with ID: {published['MessageId']}")

        self.logger.info(f"Pausing for {DELIVERY_PAUSE_SECONDS} seconds to allow message delivery...")
        self.sleep(DELIVERY_PAUSE_SECONDS)

    def _confirmed_subscription_arn(self) -> Optional[str]:
        subscriptions = self.paginate("sns", "list_subscriptions_by_topic", "Subscriptions", TopicArn=self.topic_arn)
        for subscription in subscriptions:
            self.logger.info(f"  {subscription['Protocol']} {subscription['Endpoint']}: {subscription['SubscriptionArn']}")
        for subscription in subscriptions:
            if subscription["SubscriptionArn"].lower() not in (PENDING_CONFIRMATION, "pendingconfirmation"):
                return subscription["SubscriptionArn"]
        return None

    def deleters(self) -> Dict:
        return {
            "subscription": lambda arn: self.call("sns", "unsubscribe", SubscriptionArn=arn),
            "topic": lambda arn: self.call("sns", "delete_topic", TopicArn=arn),
        }

    def manual_cleanup_commands(self) -> Dict:
        return {
            "subscription": "aws sns unsubscribe --subscription-arn {identifier}",
            "topic": "aws sns delete-topic --topic-arn {identifier}",
        }
