# storefront/api/routers/users.py
from fastapi import APIRouter, Depends, File, Form, Header, UploadFile

from storefront.api.deps import get_current_user, get_user_service
from storefront.api.uploads import read_uploads
from storefront.data.models.user import UserModel
from storefront.domain.schemas import (
    ChangePasswordIn,
    ForgotPasswordIn,
    LoginIn,
    LoginOut,
    MessageOut,
    RegisterIn,
    UserEnvelope,
    UserMessageEnvelope,
    VerifyOtpIn,
)
from storefront.services.user_service import UserService

router = APIRouter(prefix="/api/v1/user", tags=["user"])


@router.post("/register", response_model=UserMessageEnvelope, status_code=201)
def register(payload: RegisterIn, svc: UserService = Depends(get_user_service)):
    user = svc.register(payload.first_name, payload.last_name, payload.email, payload.password)
    return {
        "success": True,
        "message": "User registered successfully. Verification email sent.",
        "user": user,
    }


@router.get("/verify", response_model=MessageOut)
def verify(
    authorization: str | None = Header(default=None),
    svc: UserService = Depends(get_user_service),
):
    svc.verify(authorization)
    return {"success": True, "message": "Email verified successfully"}


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, svc: UserService = Depends(get_user_service)):
    result = svc.login(payload.email, payload.password)
    return {"success": True, "message": "Login successful", **result}


@router.post("/logout", response_model=MessageOut)
def logout(
    user: UserModel = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
):
    svc.logout(user)
    return {"success": True, "message": "Logout successful"}


@router.post("/forgot-password", response_model=MessageOut)
def forgot_password(payload: ForgotPasswordIn, svc: UserService = Depends(get_user_service)):
    svc.forgot_password(payload.email)
    return {"success": True, "message": "OTP sent successfully"}


@router.post("/verify-otp/{email}", response_model=MessageOut)
def verify_otp(email: str, payload: VerifyOtpIn, svc: UserService = Depends(get_user_service)):
    svc.verify_otp(email, payload.otp)
    return {"success": True, "message": "OTP verified"}


@router.post("/change-password/{email}", response_model=MessageOut)
def change_password(email: str, payload: ChangePasswordIn, svc: UserService = Depends(get_user_service)):
    svc.change_password(email, payload.new_password, payload.confirm_password)
    return {"success": True, "message": "Password changed successfully"}


@router.get("/get-user/{user_id}", response_model=UserEnvelope)
def get_user(user_id: int, svc: UserService = Depends(get_user_service)):
    return {"success": True, "user": svc.get_user(user_id)}


@router.put("/update/{user_id}", response_model=UserMessageEnvelope)
def update_user(
    user_id: int,
    first_name: str | None = Form(None, alias="firstName"),
    last_name: str | None = Form(None, alias="lastName"),
    address: str | None = Form(None),
    city: str | None = Form(None),
    zip_code: str | None = Form(None, alias="zipCode"),
    phone_number: str | None = Form(None, alias="phoneNumber"),
    role: str | None = Form(None),
    file: UploadFile | None = File(None),
    actor: UserModel = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
):
    fields = {
        "first_name": first_name,
        "last_name": last_name,
        "address": address,
        "city": city,
        "zip_code": zip_code,
        "phone_number": phone_number,
        "role": role,
    }
    uploads = read_uploads([file])
    user = svc.update_user(actor, user_id, fields, uploads[0] if uploads else None)
    return {"success": True, "message": "User updated successfully", "user": user}
