"""Reference supplement catalogue and the command that loads it."""

from protean import handle
from protean.fields import Boolean
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_UNSPLASH = "https://images.unsplash.com/photo-{}?q=80&w=2940&auto=format&fit=crop"

REFERENCE_CATALOGUE = [
    {
        "title": "Premium Whey Protein Isolate",
        "description": "Our highest quality whey protein with 27g of protein per serving and minimal "
        "fats and carbs. Ideal for muscle recovery and growth.",
        "price": 59.99,
        "category": "Protein",
        "tags": ["whey", "isolate", "muscle building"],
        "available_quantity": 50,
        "image_url": _UNSPLASH.format("1579722820310-211f4d88a5a9"),
    },
    {
        "title": "Mass Gainer - Chocolate",
        "description": "High-calorie formula with 1250 calories per serving to help you bulk up. "
        "Contains 50g protein and 250g carbs.",
        "price": 64.99,
        "category": "Gainers",
        "tags": ["mass gainer", "bulking", "weight gain"],
        "available_quantity": 35,
        "image_url": _UNSPLASH.format("1593095948071-474c5cc2989d"),
    },
    {
        "title": "Pre-Workout Energy Boost",
        "description": "Powerful pre-workout formula with caffeine, beta-alanine, and creatine to "
        "maximize your training performance.",
        "price": 39.99,
        "category": "Pre-Workout",
        "tags": ["energy", "focus", "pump"],
        "available_quantity": 60,
        "image_url": _UNSPLASH.format("1546483875-ad9014c88eba"),
    },
    {
        "title": "BCAAs Recovery Formula",
        "description": "2:1:1 ratio of BCAAs to support muscle recovery and reduce muscle soreness "
        "after intense workouts.",
        "price": 29.99,
        "category": "Amino Acids",
        "tags": ["recovery", "bcaa", "amino acids"],
        "available_quantity": 45,
        "image_url": _UNSPLASH.format("1517836357463-d25dfeac3438"),
    },
    {
        "title": "Vegan Plant Protein",
        "description": "Plant-based protein blend from pea, rice, and hemp sources. 24g of protein "
        "per serving with all essential amino acids.",
        "price": 49.99,
        "category": "Protein",
        "tags": ["vegan", "plant-based", "dairy-free"],
        "available_quantity": 30,
        "image_url": _UNSPLASH.format("1576402187878-974f70c890a5"),
    },
    {
        "title": "Creatine Monohydrate",
        "description": "Pure creatine monohydrate for strength gains, improved performance, and "
        "increased muscle mass.",
        "price": 24.99,
        "category": "Performance",
        "tags": ["strength", "power", "muscle"],
        "available_quantity": 75,
        "image_url": _UNSPLASH.format("1627467959547-215397e330e6"),
    },
    {
        "title": "Omega-3 Fish Oil",
        "description": "High-quality fish oil capsules providing essential omega-3 fatty acids for "
        "heart health and joint support.",
        "price": 19.99,
        "category": "Health",
        "tags": ["fish oil", "heart health", "joints"],
        "available_quantity": 0,
        "image_url": _UNSPLASH.format("1577460551100-85fa993c4e95"),
    },
    {
        "title": "Vitamin D3 + K2",
        "description": "Synergistic combination of Vitamin D3 and K2 for optimal calcium absorption "
        "and bone health.",
        "price": 17.99,
        "category": "Vitamins",
        "tags": ["vitamin d", "vitamin k", "bone health"],
        "available_quantity": 90,
        "image_url": _UNSPLASH.format("1584308074548-ad52816deb9d"),
    },
    {
        "title": "Gym Shaker Bottle",
        "description": "Premium 24oz shaker bottle with BlenderBall wire whisk for smooth, lump-free "
        "protein shakes.",
        "price": 9.99,
        "category": "Accessories",
        "tags": ["shaker", "bottle", "blender"],
        "available_quantity": 120,
        "image_url": _UNSPLASH.format("1594381898411-846e7d193883"),
    },
    {
        "title": "Weightlifting Gloves",
        "description": "Durable weightlifting gloves with wrist support. Prevents calluses and "
        "improves grip strength.",
        "price": 19.99,
        "category": "Accessories",
        "tags": ["gloves", "lifting", "gym"],
        "available_quantity": 0,
        "image_url": _UNSPLASH.format("1517836357463-d25dfeac3438"),
    },
]


@storefront.command(part_of="Product")
class SeedCatalogue:
    force = Boolean(default=False)  # seed even when products already exist


@storefront.command_handler(part_of=Product)
class SeedCatalogueHandler:
    @handle(SeedCatalogue)
    def seed_catalogue(self, command):
        repo = current_domain.repository_for(Product)
        if repo.count() > 0 and not command.force:
            logger.info("catalogue_seed_skipped", reason="catalogue not empty")
            return 0

        for entry in REFERENCE_CATALOGUE:
            repo.add(Product.create(**entry))

        logger.info("catalogue_seeded", products=len(REFERENCE_CATALOGUE))
        return len(REFERENCE_CATALOGUE)
