from sqlalchemy.orm import Session

from agroshop.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, uid: str) -> UserModel | None:
        return self.db.get(UserModel, uid)

    def get_users_by_ids(self, uids: list[str]) -> dict[str, UserModel]:
        users = {}
        for uid in dict.fromkeys(uids):
            user = self.get_user(uid)
            if user:
                users[uid] = user
        return users

