from django.contrib import admin

from .models import Bus, Category, Company, GalleryImage, Location, Package, PackageDate, Seat


class PackageDateInline(admin.TabularInline):
    model = PackageDate
    extra = 0


class GalleryImageInline(admin.TabularInline):
    model = GalleryImage
    extra = 0


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    list_display = ('title', 'location', 'category', 'price', 'sale_price', 'max_people', 'by_bus', 'popular')
    list_filter = ('category', 'by_bus', 'popular', 'company')
    search_fields = ('title', 'description', 'location__name')
    inlines = [PackageDateInline, GalleryImageInline]


@admin.register(PackageDate)
class PackageDateAdmin(admin.ModelAdmin):
    list_display = ('package', 'start_date', 'end_date', 'max_people')
    list_filter = ('package',)
    date_hierarchy = 'start_date'


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ('name', 'country')
    search_fields = ('name', 'country')


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    search_fields = ('name',)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ('name', 'created_at')
    search_fields = ('name',)


class SeatInline(admin.TabularInline):
    model = Seat
    extra = 0


@admin.register(Bus)
class BusAdmin(admin.ModelAdmin):
    list_display = ('name', 'package', 'seat_count')
    inlines = [SeatInline]


admin.site.register(GalleryImage)
