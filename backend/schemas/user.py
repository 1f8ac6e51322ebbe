from pydantic import BaseModel, EmailStr, Field

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for user registration requests
class UserCreate(UserBase):
    name: str = Field(min_length=1)
    password: str = Field(min_length=6)

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    name: str
    role: str

    class Config:
        from_attributes = True

# Schema for signup/login result: profile plus JWT token
class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"
