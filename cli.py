"""
Command-line interface for zkvault.

Provides text-based menu for:
- Account sign up and login
- Key pair generation and public key management
- File upload (sealed under the stored public key)
- File download (opened with a private key pasted at use time)
- File listing and deletion
"""

from getpass import getpass
from pathlib import Path
from typing import List, Optional

from accounts import AccountManager, JSONStorage, SimpleHasher, User
from settings import Config, load_config, setup_logging
from vault import (
    JSONRecordStore,
    PublicKeySlot,
    RecordStore,
    SealedFile,
    delete_file,
    describe_failure,
    download_file,
    list_files,
    upload_file,
)
from zkcrypto import VaultCryptoError, keys


class Session:
    """Collaborators shared by the menu handlers."""

    def __init__(self, config: Config):
        self.config = config
        self.accounts = AccountManager(JSONStorage(str(config.storage.users_file)), SimpleHasher())
        self.store: RecordStore = JSONRecordStore(config.storage.vault_root)
        self.key_slot = PublicKeySlot(config.storage.key_slot_file)


def format_file_size(size: int) -> str:
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{value:.2f}".rstrip("0").rstrip(".") + f" {units[i]}"


def print_menu(user: Optional[User] = None, has_key: bool = False) -> None:
    print("\n" + "=" * 50)
    if user:
        print(f"  🔐 zkvault - Logged in as: {user.email}")
        print(f"     Public key: {'set' if has_key else 'not set'}")
    else:
        print("  🔐 zkvault")
    print("=" * 50)

    if not user:
        print("  1) Sign up")
        print("  2) Log in")
        print("  0) Quit")
    else:
        print("  1) Upload file")
        print("  2) Download file")
        print("  3) List my files")
        print("  4) Delete a file")
        print("  5) Generate key pair")
        print("  6) Import public key")
        print("  7) Show public key")
        print("  8) Clear public key")
        print("  9) Log out")
        print("  0) Quit")
    print("=" * 50)


def handle_signup(session: Session) -> None:
    print("\n📝 Create New Account")
    email = input("Email: ").strip()
    if not email:
        print("❌ Email cannot be empty")
        return

    password = getpass("Password: ")
    confirm = getpass("Confirm password: ")
    if password != confirm:
        print("❌ Passwords don't match")
        return

    try:
        user = session.accounts.register(email, password)
        print(f"✅ Account created: {user.email}")
        print("   Next: generate or import a key pair before uploading")
    except ValueError as e:
        print(f"❌ Error: {e}")


def handle_login(session: Session) -> Optional[User]:
    print("\n🔑 Login")
    email = input("Email: ").strip()
    password = getpass("Password: ")

    user = session.accounts.authenticate(email, password)
    if user:
        print(f"✅ Welcome back, {user.email}!")
        return user
    print("❌ Invalid credentials")
    return None


def handle_generate_keys(session: Session, user: User) -> None:
    print("\n🗝️ Generate Key Pair")
    result = keys.generate(session.config.crypto.rsa_key_size)
    if not result.is_ok():
        print(f"❌ {result.public_message}")
        return
    pair = result.value
    session.key_slot.store(user.user_id, pair.public_key)

    print("\nPublic key (stored for uploads):")
    print(pair.public_key)
    print("\nPrivate key (NOT stored anywhere - copy it now):")
    print(pair.private_key)
    print("\n⚠️ Without this private key your files cannot be decrypted.")
    input("Press Enter once you have saved the private key...")


def handle_import_public_key(session: Session, user: User) -> None:
    print("\n📥 Import Public Key")
    text = input("Public key (hex): ").strip()
    try:
        session.key_slot.store(user.user_id, text)
        print("✅ Public key stored")
    except VaultCryptoError as e:
        print(f"❌ {describe_failure(e)}")


def handle_show_public_key(session: Session, user: User) -> None:
    public_key = session.key_slot.get(user.user_id)
    if not public_key:
        print("   No public key set")
        return
    print(f"\nFingerprint: {keys.fingerprint(public_key).unwrap_or('unknown')}")
    print(public_key)


def handle_clear_public_key(session: Session, user: User) -> None:
    if session.key_slot.remove(user.user_id):
        print("✅ Public key cleared")
    else:
        print("   No public key set")


def handle_upload(session: Session, user: User) -> None:
    print("\n📤 Upload File")
    public_key = session.key_slot.get(user.user_id)
    if not public_key:
        print("❌ Please generate or import a public key first")
        return

    filepath = input("File path: ").strip()
    if not filepath:
        print("❌ File path cannot be empty")
        return

    try:
        entry = upload_file(user.user_id, filepath, public_key, store=session.store)
        print("\n✅ File encrypted and uploaded successfully!")
        print(f"   📄 Filename: {entry.filename}")
        print(f"   🔑 File ID: {entry.id}")
        print(f"   📊 Size: {format_file_size(entry.file_size)}")
        print("   🔒 Encrypted with AES-256-GCM, key wrapped with RSA-OAEP")
    except (OSError, ValueError, VaultCryptoError) as e:
        print(f"❌ Upload failed: {describe_failure(e)}")


def _print_files(files: List[SealedFile]) -> None:
    for i, f in enumerate(files, 1):
        print(f"   {i}. {f.filename} ({format_file_size(f.file_size)})")
        print(f"      ID: {f.id[:8]}... | {f.created_at[:10]}")


def _select_file(files: List[SealedFile], prompt: str) -> Optional[SealedFile]:
    try:
        choice = int(input(prompt)) - 1
    except ValueError:
        print("❌ Invalid input")
        return None
    if choice < 0 or choice >= len(files):
        print("❌ Invalid selection")
        return None
    return files[choice]


def handle_download(session: Session, user: User) -> None:
    print("\n📥 Download File")
    files = list_files(user.user_id, store=session.store)
    if not files:
        print("   No files available")
        return

    _print_files(files)
    selected = _select_file(files, "\nSelect file number: ")
    if not selected:
        return

    print("Paste your private key (hex). It is never stored or sent anywhere.")
    private_key = getpass("Private key: ").strip()
    if not private_key:
        print("❌ Private key cannot be empty")
        return

    dest = session.config.storage.download_dir
    try:
        target = download_file(
            user.user_id,
            selected.id,
            private_key,
            str(dest) if dest else None,
            store=session.store,
        )
        print("\n✅ File decrypted and verified!")
        print(f"   📁 Saved to: {target}")
    except (OSError, ValueError, VaultCryptoError) as e:
        print(f"❌ Decryption failed: {describe_failure(e)}")


def handle_list_files(session: Session, user: User) -> None:
    print("\n📁 My Files")
    search = input("Search by name (Enter for all): ").strip()
    sort_by = input("Sort by date/name/size (Enter for date): ").strip().lower() or "date"
    order = input("Order desc/asc (Enter for desc): ").strip().lower() or "desc"
    if order not in ("desc", "asc"):
        print("❌ Invalid order")
        return

    try:
        files = list_files(
            user.user_id,
            store=session.store,
            search=search,
            sort_by=sort_by,
            descending=order == "desc",
        )
    except ValueError as e:
        print(f"❌ {e}")
        return
    if not files:
        print(f"   No files matching '{search}'" if search else "   No files uploaded yet")
        return
    _print_files(files)


def handle_delete(session: Session, user: User) -> None:
    print("\n🗑️ Delete a File")
    files = list_files(user.user_id, store=session.store)
    if not files:
        print("   No files to delete")
        return

    _print_files(files)
    selected = _select_file(files, "\nSelect file to delete: ")
    if not selected:
        return

    confirm = input(f"Delete '{selected.filename}'? This cannot be undone. (yes/no): ").strip().lower()
    if confirm != "yes":
        print("   Cancelled")
        return

    if delete_file(user.user_id, selected.id, store=session.store):
        print("✅ File deleted")
    else:
        print("❌ File not found")


def main(config_path: Optional[str] = None):
    config = load_config(Path(config_path) if config_path else None)
    setup_logging(config)
    session = Session(config)
    current_user: Optional[User] = None

    print("\n🔐 zkvault - zero-knowledge file storage")
    print("   Keys never leave this machine\n")

    while True:
        has_key = bool(current_user and session.key_slot.has(current_user.user_id))
        print_menu(current_user, has_key)
        choice = input("> ").strip()

        if current_user is None:
            if choice == "1":
                handle_signup(session)
            elif choice == "2":
                current_user = handle_login(session)
            elif choice == "0":
                print("\nGoodbye! 👋")
                break
            else:
                print("❌ Invalid choice")
        else:
            if choice == "1":
                handle_upload(session, current_user)
            elif choice == "2":
                handle_download(session, current_user)
            elif choice == "3":
                handle_list_files(session, current_user)
            elif choice == "4":
                handle_delete(session, current_user)
            elif choice == "5":
                handle_generate_keys(session, current_user)
            elif choice == "6":
                handle_import_public_key(session, current_user)
            elif choice == "7":
                handle_show_public_key(session, current_user)
            elif choice == "8":
                handle_clear_public_key(session, current_user)
            elif choice == "9":
                print(f"\n👋 Logged out from {current_user.email}")
                current_user = None
            elif choice == "0":
                print("\nGoodbye! 👋")
                break
            else:
                print("❌ Invalid choice")


if __name__ == "__main__":
    import sys

    main(sys.argv[1] if len(sys.argv) > 1 else None)
