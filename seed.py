import os

from app import create_app
from entities import DayOfWeek, Role, TimeOfDay, User

seed_shows = [
    (DayOfWeek.MONDAY, TimeOfDay.EVENING, "Inception"),
    (DayOfWeek.WEDNESDAY, TimeOfDay.AFTERNOON, "Arrival"),
    (DayOfWeek.FRIDAY, TimeOfDay.EVENING, "Interstellar"),
    (DayOfWeek.SATURDAY, TimeOfDay.NIGHT, "Blade Runner 2049"),
    (DayOfWeek.SUNDAY, TimeOfDay.MORNING, "Zootopia 2"),
]

app = create_app()
services = app.extensions["services"]

# ------------------------------
# Seed Admin User
# ------------------------------
admin_email = os.getenv("ADMIN_EMAIL", "admin@cinema.local")
admin_password = os.getenv("ADMIN_PASSWORD", "Admin123!")

admin = User(firstname="Cinema", lastname="Admin", email=admin_email, roles={Role.ADMIN, Role.USER})
if services.users.register(admin, admin_password) is not None:
    print("Admin user created!")
else:
    print("Admin user already exists")

# ------------------------------
# Seed Shows
# ------------------------------
for day, time, movie in seed_shows:
    show = services.shows.create_show(day, time, movie)
    if show is None:
        print(f"Skipping {movie} ({day.name} {time.name} already taken)")
        continue
    print(f"Added show: {movie} on {day.value} at {time.label} with {len(show.tickets)} tickets")

print("Seeding complete!")
