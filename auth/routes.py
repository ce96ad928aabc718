from fastapi import APIRouter, Depends, status

from auth import crud
from auth.constants import Action
from auth.models import Token, UserCreate, UserLogin, UserResponse
from common.auth_utils import create_access_token, get_current_user, require
from common.database import get_mongo_db
from common.helpers import db_connection_handler, success

auth = APIRouter()


def _token_for(user: dict) -> Token:
    return Token(
        access_token=create_access_token(user["_id"]),
        user=UserResponse.from_document(user),
    )


@auth.post("/signup", status_code=status.HTTP_201_CREATED)
@db_connection_handler
async def signup(user: UserCreate, db=Depends(get_mongo_db)):
    new_user = crud.create_user(db, user)
    return success(_token_for(new_user), "User registered successfully")


@auth.post("/login")
@db_connection_handler
async def login(credentials: UserLogin, db=Depends(get_mongo_db)):
    user = crud.authenticate(db, credentials.email, credentials.password)
    return success(_token_for(user), "Login successful")


@auth.get("/me")
async def get_me(user: dict = Depends(get_current_user)):
    return success(UserResponse.from_document(user))


@auth.get("/users")
@db_connection_handler
async def get_all_users(
    _admin: dict = Depends(require(Action.LIST_USERS)), db=Depends(get_mongo_db)
):
    users = [UserResponse.from_document(u) for u in crud.list_users(db)]
    return success(users, count=len(users))


@auth.delete("/users/{user_id}")
@db_connection_handler
async def delete_user(
    user_id: str,
    _admin: dict = Depends(require(Action.DELETE_USER)),
    db=Depends(get_mongo_db),
):
    crud.delete_user(db, user_id)
    return success(message="User deleted successfully")
