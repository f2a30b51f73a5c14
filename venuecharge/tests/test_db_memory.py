import asyncio
import unittest

from venuecharge.db import InMemoryStorageClient
from venuecharge.schemas import (
    InsertAdvertiser,
    InsertContactSubmission,
    InsertUser,
    InsertVenue,
)


class InMemoryStorageClientTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.db = InMemoryStorageClient()

    async def test_ids_increase_per_entity(self):
        venue_a = await self.db.create_venue(
            InsertVenue(name="A", contact_name="a", email="a@a.com")
        )
        venue_b = await self.db.create_venue(
            InsertVenue(name="B", contact_name="b", email="b@b.com")
        )
        advertiser = await self.db.create_advertiser(
            InsertAdvertiser(name="C", contact_name="c", email="c@c.com")
        )
        self.assertEqual((venue_a.id, venue_b.id), (1, 2))
        self.assertEqual(advertiser.id, 1)

    async def test_concurrent_creates_get_distinct_ids(self):
        submissions = await asyncio.gather(
            *(
                self.db.create_contact_submission(
                    InsertContactSubmission(
                        name=f"Guest {i}", email=f"g{i}@x.com", business="Cafe"
                    )
                )
                for i in range(25)
            )
        )
        ids = [s.id for s in submissions]
        self.assertEqual(sorted(ids), list(range(1, 26)))
        self.assertTrue(all(s.status == "new" for s in submissions))

    async def test_venue_defaults(self):
        venue = await self.db.create_venue(
            InsertVenue(name="A", contact_name="a", email="a@a.com")
        )
        self.assertEqual(venue.number_of_stations, 1)
        self.assertTrue(venue.is_active)
        self.assertIsNone(venue.installation_date)
        self.assertIsNotNone(venue.created_at.tzinfo)

    async def test_zero_station_count_uses_default(self):
        venue = await self.db.create_venue(
            InsertVenue(
                name="A", contact_name="a", email="a@a.com", number_of_stations=0
            )
        )
        self.assertEqual(venue.number_of_stations, 1)

    async def test_advertiser_defaults(self):
        advertiser = await self.db.create_advertiser(
            InsertAdvertiser(name="C", contact_name="c", email="c@c.com")
        )
        self.assertTrue(advertiser.is_active)
        self.assertIsNone(advertiser.start_date)
        self.assertIsNone(advertiser.end_date)

    async def test_lookups_return_none_when_absent(self):
        self.assertIsNone(await self.db.get_venue(7))
        self.assertIsNone(await self.db.get_advertiser(7))
        self.assertIsNone(await self.db.get_user(7))
        self.assertEqual(await self.db.get_venues(), [])
        self.assertEqual(await self.db.get_contact_submissions(), [])

    async def test_user_lookup_by_username(self):
        user = await self.db.create_user(InsertUser(username="admin", password="pw"))
        self.assertEqual(await self.db.get_user(user.id), user)
        self.assertEqual(await self.db.get_user_by_username("admin"), user)
        self.assertIsNone(await self.db.get_user_by_username("guest"))

    async def test_duplicate_usernames_are_not_rejected(self):
        first = await self.db.create_user(InsertUser(username="admin", password="a"))
        second = await self.db.create_user(InsertUser(username="admin", password="b"))
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(await self.db.get_user_by_username("admin"), first)

    async def test_reset_clears_records_and_counters(self):
        await self.db.create_venue(
            InsertVenue(name="A", contact_name="a", email="a@a.com")
        )
        self.db.reset()
        self.assertEqual(await self.db.get_venues(), [])
        venue = await self.db.create_venue(
            InsertVenue(name="B", contact_name="b", email="b@b.com")
        )
        self.assertEqual(venue.id, 1)


if __name__ == "__main__":
    unittest.main()
