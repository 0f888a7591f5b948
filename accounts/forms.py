# accounts/forms.py
from django import forms

from utils.validators import PASSWORD_MIN_LENGTH, is_blank, normalize_email


class SignupForm(forms.Form):
    name = forms.CharField(
        label="Name",
        max_length=150,
        error_messages={"required": "Name is required"},
        widget=forms.TextInput(attrs={"class": "form-control", "autocomplete": "name"}),
    )
    email = forms.EmailField(
        label="Email",
        max_length=254,
        error_messages={"required": "Email is required", "invalid": "Enter a valid email address"},
        widget=forms.EmailInput(attrs={"class": "form-control", "autocomplete": "email"}),
    )
    password = forms.CharField(
        label="Password",
        min_length=PASSWORD_MIN_LENGTH,
        strip=False,
        error_messages={
            "required": "Password is required",
            "min_length": f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
        },
        widget=forms.PasswordInput(attrs={
            "class": "form-control",
            "minlength": PASSWORD_MIN_LENGTH,
            "autocomplete": "new-password",
        }),
    )

    def clean_name(self):
        name = self.cleaned_data.get("name")
        if is_blank(name):
            raise forms.ValidationError("Name is required")
        return name.strip()

    def clean_email(self):
        return normalize_email(self.cleaned_data.get("email"))

    def first_error(self) -> str:
        """First validation message, in field order."""
        for field in self.fields:
            if field in self.errors:
                return self.errors[field][0]
        return "Invalid request body"


class SigninForm(forms.Form):
    email = forms.EmailField(
        label="Email",
        error_messages={"required": "Email is required", "invalid": "Enter a valid email address"},
        widget=forms.EmailInput(attrs={"class": "form-control", "autocomplete": "email"}),
    )
    password = forms.CharField(
        label="Password",
        strip=False,
        error_messages={"required": "Password is required"},
        widget=forms.PasswordInput(attrs={"class": "form-control", "autocomplete": "current-password"}),
    )

    def clean_email(self):
        return normalize_email(self.cleaned_data.get("email"))
