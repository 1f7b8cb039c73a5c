from app.config import Config
from app.services.authorization.allow_all_authorization import AllowAllAuthorization
from app.services.interfaces.authorization import Authorization


class AuthorizationFactory:
    def __init__(self, config: Config) -> None:
        self.__config = config

    def create_authorization(self) -> Authorization:
        auth_type = self.__config.authorization.type

        match auth_type:
            case "allow_all":
                return AllowAllAuthorization()
            case _:
                raise ValueError(
                    "incorrect value for authorization, supported types are 'allow_all'. Please fix in app.conf"
                )
