from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.bookings.models import Discount
from apps.catalog.constants import DEFAULT_CATEGORIES
from apps.catalog.models import Bus, Category, Company, GalleryImage, Location, Package, PackageDate, Seat

User = get_user_model()

LOCATIONS = [
    ('Kazbegi', 'Georgia'),
    ('Batumi', 'Georgia'),
    ('Kakheti', 'Georgia'),
    ('Svaneti', 'Georgia'),
    ('Borjomi', 'Georgia'),
]


class Command(BaseCommand):
    help = 'Seed the database with a demo catalog'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('Starting to seed data...'))

        self.create_operator()
        categories = self.create_categories()
        locations = self.create_locations()
        company = self.create_company()
        self.create_packages(categories, locations, company)
        self.create_discount()

        self.stdout.write(self.style.SUCCESS('Successfully seeded all data!'))

    def create_operator(self):
        """Create the operator account if it doesn't exist."""
        username = 'operator'
        if User.objects.filter(username=username).exists():
            self.stdout.write(self.style.WARNING(f'User "{username}" already exists. Skipping...'))
            return User.objects.get(username=username)

        operator = User.objects.create_user(
            username=username,
            email='operator@agency.ge',
            password='operator123',
            role=User.ROLE_OPERATOR,
            is_staff=True,
        )
        self.stdout.write(self.style.SUCCESS(f'Created operator user: {username}'))
        return operator

    def create_categories(self):
        categories = {}
        for name in DEFAULT_CATEGORIES:
            categories[name], _ = Category.objects.get_or_create(name=name)
        self.stdout.write(self.style.SUCCESS(f'Ensured {len(categories)} categories.'))
        return categories

    def create_locations(self):
        locations = {}
        for name, country in LOCATIONS:
            locations[name], _ = Location.objects.get_or_create(name=name, country=country)
        return locations

    def create_company(self):
        company, _ = Company.objects.get_or_create(
            name='Caucasus Trails',
            defaults={'description': 'Small group tours across Georgia.'},
        )
        return company

    def create_packages(self, categories, locations, company):
        if Package.objects.exists():
            self.stdout.write(self.style.WARNING('Packages already exist. Skipping...'))
            return

        today = timezone.localdate()

        wine_tour = Package.objects.create(
            title='Kakheti Wine Weekend',
            description='Two days among the vineyards of Telavi and Sighnaghi.',
            price=Decimal('150.00'),
            sale_price=Decimal('120.00'),
            duration='2 days',
            start_date=today + timedelta(days=14),
            end_date=today + timedelta(days=15),
            max_people=12,
            popular=True,
            category=categories['Culinary'],
            location=locations['Kakheti'],
            company=company,
        )
        GalleryImage.objects.create(package=wine_tour, url='https://images.example.com/kakheti/1.jpg')

        bus_tour = Package.objects.create(
            title='Kazbegi Day Trip',
            description='Gergeti Trinity Church and the Dariali gorge by coach.',
            price=Decimal('80.00'),
            duration='1 day',
            max_people=40,
            by_bus=True,
            category=categories['Adventure'],
            location=locations['Kazbegi'],
            company=company,
        )
        for offset in (7, 14, 21):
            start = today + timedelta(days=offset)
            PackageDate.objects.create(package=bus_tour, start_date=start, end_date=start, max_people=40)

        bus = Bus.objects.create(name='Coach 1', seat_count=40, package=bus_tour)
        Seat.objects.bulk_create(Seat(bus=bus, number=str(number)) for number in range(1, bus.seat_count + 1))

        self.stdout.write(self.style.SUCCESS('Created 2 packages with dates and a bus.'))

    def create_discount(self):
        _, created = Discount.objects.get_or_create(
            code='WELCOME10',
            defaults={
                'amount': Decimal('10.00'),
                'expires_at': timezone.now() + timedelta(days=90),
            },
        )
        if created:
            self.stdout.write(self.style.SUCCESS('Created discount code WELCOME10'))
