class HabitBotError(Exception):
    pass


class ConfigError(HabitBotError):
    """Invalid or missing configuration. Fatal at startup."""


class StoreError(HabitBotError):
    """The entry store failed to read or write."""


class GatewayError(HabitBotError):
    """The messaging gateway failed to deliver a message."""


class HabitNotTrackable(HabitBotError):
    def __init__(self, habit_id, user_id):
        super().__init__(f"habit {habit_id} is not trackable for user {user_id}")
        self.habit_id = habit_id
        self.user_id = user_id
