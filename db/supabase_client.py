"""
Supabase database client with CRUD operations.
Handles all database interactions for appointments, barber unavailability,
gallery images and appointment file uploads.

Row Level Security (RLS) Notes:
==============================
The service key bypasses RLS, so role checks (admin vs. barber) live in the
dashboard layer that calls this client, never in the browser.

Example RLS Policies (SQL):
----------------------------
-- Public site: anyone may read gallery images
CREATE POLICY "Gallery is public"
ON gallery_images FOR SELECT
USING (true);

-- Appointments and unavailable_slots are only reachable with the service key
ALTER TABLE appointments ENABLE ROW LEVEL SECURITY;
ALTER TABLE unavailable_slots ENABLE ROW LEVEL SECURITY;

Schema Migrations (SQL):
------------------------
-- Every duration block of one booking carries the same booking_group uuid;
-- deleting any block deletes the group. Run once on existing projects.
ALTER TABLE appointments ADD COLUMN IF NOT EXISTS booking_group uuid;
CREATE INDEX IF NOT EXISTS appointments_booking_group_idx
ON appointments (booking_group);
"""

from datetime import date
from typing import Dict, List, Optional

from supabase import Client as SupabaseClientType
from supabase import create_client

from config import settings
from models.appointment import Appointment, AppointmentCreate, AppointmentStatus
from models.gallery import GalleryImage, GalleryImageCreate, ImageType
from models.unavailability import UnavailabilityCreate, UnavailabilitySlot
from utils.constants import NIL_UUID
from utils.datetime_utils import parse_iso_datetime, to_iso_date
from utils.exceptions import DatabaseError, StorageError

APPOINTMENTS_TABLE = "appointments"
UNAVAILABLE_TABLE = "unavailable_slots"
GALLERY_TABLE = "gallery_images"


class SupabaseClient:
    """
    Supabase database client wrapper.

    Uses the service_role key which bypasses RLS; callers enforce roles.
    Every failure of the underlying client surfaces as DatabaseError.
    """

    def __init__(self):
        """Initialize Supabase client from settings."""
        self.client: SupabaseClientType = create_client(
            settings.supabase_url, settings.supabase_key
        )

    # ========== Appointment Operations ==========

    async def create_appointment(
        self, appointment_data: AppointmentCreate
    ) -> Optional[Appointment]:
        """
        Insert one appointment row.

        Returns:
            The stored appointment, or None when the insert returned no row
        """
        try:
            data = appointment_data.model_dump(mode="json", exclude_none=True)

            response = self.client.table(APPOINTMENTS_TABLE).insert(data).execute()

            if not response.data:
                return None

            return self._parse_appointment(response.data[0])
        except Exception as e:
            raise DatabaseError(f"Failed to create appointment: {e}") from e

    async def get_appointment_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Get appointment by ID."""
        try:
            response = (
                self.client.table(APPOINTMENTS_TABLE)
                .select("*")
                .eq("id", appointment_id)
                .execute()
            )

            if response.data:
                return self._parse_appointment(response.data[0])
            return None
        except Exception as e:
            raise DatabaseError(f"Failed to get appointment: {e}") from e

    async def get_appointments(self) -> List[Appointment]:
        """Get every appointment, newest first (admin view)."""
        try:
            response = (
                self.client.table(APPOINTMENTS_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )

            return [self._parse_appointment(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to get appointments: {e}") from e

    async def get_appointments_by_barber(
        self, barber_name: str, day: Optional[date] = None
    ) -> List[Appointment]:
        """
        Get a barber's appointments, newest first.

        Args:
            barber_name: Barber whose appointments to fetch
            day: Only this calendar day when given
        """
        try:
            query = (
                self.client.table(APPOINTMENTS_TABLE)
                .select("*")
                .eq("barber_name", barber_name)
            )

            if day:
                query = query.eq("date", to_iso_date(day))

            response = query.order("created_at", desc=True).execute()

            return [self._parse_appointment(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to get appointments by barber: {e}") from e

    async def get_booking_group(self, booking_group: str) -> List[Appointment]:
        """Get every duration block that belongs to one booking."""
        try:
            response = (
                self.client.table(APPOINTMENTS_TABLE)
                .select("*")
                .eq("booking_group", booking_group)
                .execute()
            )

            return [self._parse_appointment(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to get booking group: {e}") from e

    async def find_customer_appointments(
        self, barber_name: str, day: date, customer_name: str, customer_phone: str
    ) -> List[Appointment]:
        """
        Get one customer's appointments with a barber on a day.

        Used to find duration block siblings of rows saved without a
        booking_group.
        """
        try:
            response = (
                self.client.table(APPOINTMENTS_TABLE)
                .select("*")
                .eq("barber_name", barber_name)
                .eq("date", to_iso_date(day))
                .eq("customer_name", customer_name)
                .eq("customer_phone", customer_phone)
                .execute()
            )

            return [self._parse_appointment(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to find customer appointments: {e}") from e

    async def update_appointment_status(
        self, appointment_id: str, status: AppointmentStatus
    ) -> Optional[Appointment]:
        """Update appointment status."""
        try:
            response = (
                self.client.table(APPOINTMENTS_TABLE)
                .update({"status": AppointmentStatus(status).value})
                .eq("id", appointment_id)
                .execute()
            )

            if not response.data:
                return None

            return self._parse_appointment(response.data[0])
        except Exception as e:
            raise DatabaseError(f"Failed to update appointment status: {e}") from e

    async def update_appointment_files(
        self,
        appointment_id: str,
        receipt_url: Optional[str] = None,
        notes_url: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[Appointment]:
        """Update the attachment/notes fields that were given."""
        update_data: Dict[str, str] = {}
        if receipt_url is not None:
            update_data["receipt_url"] = receipt_url
        if notes_url is not None:
            update_data["notes_url"] = notes_url
        if notes is not None:
            update_data["notes"] = notes

        if not update_data:
            return await self.get_appointment_by_id(appointment_id)

        try:
            response = (
                self.client.table(APPOINTMENTS_TABLE)
                .update(update_data)
                .eq("id", appointment_id)
                .execute()
            )

            if not response.data:
                return None

            return self._parse_appointment(response.data[0])
        except Exception as e:
            raise DatabaseError(f"Failed to update appointment files: {e}") from e

    async def delete_appointments(self, appointment_ids: List[str]) -> int:
        """
        Delete several appointments in one request.

        Returns:
            Number of rows deleted
        """
        if not appointment_ids:
            return 0

        try:
            response = (
                self.client.table(APPOINTMENTS_TABLE)
                .delete()
                .in_("id", appointment_ids)
                .execute()
            )
            return len(response.data or [])
        except Exception as e:
            raise DatabaseError(f"Failed to delete appointments: {e}") from e

    async def delete_all_appointments(self) -> int:
        """Delete every appointment (admin operation)."""
        try:
            response = (
                self.client.table(APPOINTMENTS_TABLE)
                .delete()
                .neq("id", NIL_UUID)
                .execute()
            )
            return len(response.data or [])
        except Exception as e:
            raise DatabaseError(f"Failed to clear appointments: {e}") from e

    async def delete_barber_appointments(self, barber_name: str) -> int:
        """Delete every appointment of one barber."""
        try:
            response = (
                self.client.table(APPOINTMENTS_TABLE)
                .delete()
                .eq("barber_name", barber_name)
                .execute()
            )
            return len(response.data or [])
        except Exception as e:
            raise DatabaseError(f"Failed to clear barber appointments: {e}") from e

    # ========== Unavailability Operations ==========

    async def create_unavailability(
        self, slots: List[UnavailabilityCreate]
    ) -> List[UnavailabilitySlot]:
        """Insert one or more unavailability rows in a single request."""
        if not slots:
            return []

        try:
            data = [slot.model_dump(mode="json") for slot in slots]

            response = self.client.table(UNAVAILABLE_TABLE).insert(data).execute()

            if not response.data:
                raise ValueError("no data returned")

            return [self._parse_unavailability(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to mark unavailability: {e}") from e

    async def get_unavailability_by_id(self, slot_id: str) -> Optional[UnavailabilitySlot]:
        """Get unavailability record by ID."""
        try:
            response = (
                self.client.table(UNAVAILABLE_TABLE)
                .select("*")
                .eq("id", slot_id)
                .execute()
            )

            if response.data:
                return self._parse_unavailability(response.data[0])
            return None
        except Exception as e:
            raise DatabaseError(f"Failed to get unavailable slot: {e}") from e

    async def get_upcoming_unavailability(
        self, barber_name: str, from_date: date
    ) -> List[UnavailabilitySlot]:
        """Get a barber's unavailability from a day onward, by date."""
        try:
            response = (
                self.client.table(UNAVAILABLE_TABLE)
                .select("*")
                .eq("barber_name", barber_name)
                .gte("date", to_iso_date(from_date))
                .order("date", desc=False)
                .execute()
            )

            return [self._parse_unavailability(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to get unavailable slots: {e}") from e

    async def get_unavailability_for_date(
        self, barber_name: str, day: date
    ) -> List[UnavailabilitySlot]:
        """Get a barber's unavailability for one day."""
        try:
            response = (
                self.client.table(UNAVAILABLE_TABLE)
                .select("*")
                .eq("barber_name", barber_name)
                .eq("date", to_iso_date(day))
                .execute()
            )

            return [self._parse_unavailability(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(
                f"Failed to get unavailable slots for date: {e}"
            ) from e

    async def delete_unavailability(self, slot_id: str) -> bool:
        """Delete one unavailability record."""
        try:
            response = (
                self.client.table(UNAVAILABLE_TABLE)
                .delete()
                .eq("id", slot_id)
                .execute()
            )
            return len(response.data or []) > 0
        except Exception as e:
            raise DatabaseError(f"Failed to remove unavailable slot: {e}") from e

    # ========== Gallery Operations ==========

    async def create_gallery_image(self, image_data: GalleryImageCreate) -> GalleryImage:
        """Insert a gallery image record."""
        try:
            data = image_data.model_dump(mode="json", exclude_none=True)

            response = self.client.table(GALLERY_TABLE).insert(data).execute()

            if not response.data:
                raise ValueError("no data returned")

            return self._parse_gallery_image(response.data[0])
        except Exception as e:
            raise DatabaseError(f"Failed to add gallery image: {e}") from e

    async def get_gallery_images(
        self, image_type: Optional[ImageType] = None
    ) -> List[GalleryImage]:
        """Get gallery images, newest first, optionally of one type."""
        try:
            query = self.client.table(GALLERY_TABLE).select("*")

            if image_type:
                query = query.eq("image_type", ImageType(image_type).value)

            response = query.order("created_at", desc=True).execute()

            return [self._parse_gallery_image(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to get gallery images: {e}") from e

    async def delete_gallery_image(self, image_id: str) -> bool:
        """Delete one gallery image record."""
        try:
            response = (
                self.client.table(GALLERY_TABLE)
                .delete()
                .eq("id", image_id)
                .execute()
            )
            return len(response.data or []) > 0
        except Exception as e:
            raise DatabaseError(f"Failed to remove gallery image: {e}") from e

    async def delete_gallery_images(self, image_type: Optional[ImageType] = None) -> int:
        """Delete every gallery image, or every image of one type."""
        try:
            query = self.client.table(GALLERY_TABLE).delete()

            if image_type:
                query = query.eq("image_type", ImageType(image_type).value)
            else:
                query = query.neq("id", NIL_UUID)

            response = query.execute()
            return len(response.data or [])
        except Exception as e:
            raise DatabaseError(f"Failed to clear gallery images: {e}") from e

    # ========== Storage Operations ==========

    async def upload_file(self, path: str, data: bytes, content_type: str) -> str:
        """
        Upload a file to the appointment files bucket.

        Args:
            path: Object path inside the bucket
            data: File content
            content_type: MIME type stored with the object

        Returns:
            Public URL of the uploaded object
        """
        try:
            bucket = self.client.storage.from_(settings.storage_bucket)
            bucket.upload(path, data, file_options={"content-type": content_type})
            return bucket.get_public_url(path)
        except Exception as e:
            raise StorageError(f"Failed to upload file: {e}") from e

    # ========== Helper Methods ==========

    def _parse_appointment(self, item: dict) -> Appointment:
        """
        Parse appointment data from database response.

        Args:
            item: Raw appointment data from database

        Returns:
            Parsed Appointment object
        """
        item = item.copy()
        if item.get("created_at"):
            item["created_at"] = parse_iso_datetime(item["created_at"])
        for field in ("receipt_url", "notes_url", "notes"):
            if not item.get(field):
                item[field] = None
        return Appointment(**item)

    def _parse_unavailability(self, item: dict) -> UnavailabilitySlot:
        item = item.copy()
        if item.get("created_at"):
            item["created_at"] = parse_iso_datetime(item["created_at"])
        item["is_whole_day"] = bool(item.get("is_whole_day"))
        return UnavailabilitySlot(**item)

    def _parse_gallery_image(self, item: dict) -> GalleryImage:
        item = item.copy()
        if item.get("created_at"):
            item["created_at"] = parse_iso_datetime(item["created_at"])
        return GalleryImage(**item)


# Global database client instance
_db_client: Optional[SupabaseClient] = None


def get_db_client() -> SupabaseClient:
    """Get or create database client instance."""
    global _db_client
    if _db_client is None:
        _db_client = SupabaseClient()
    return _db_client
