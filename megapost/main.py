#!/usr/bin/env python3
"""
Megapost - CLI Marketing Image Generator

Turns one product image into seven AI-generated marketing variants
using Google Gemini image generation.

Usage:
    megapost <image.jpg | https://...> [--category NAME ...] [--output DIR]

Example:
    megapost products/mug.png
    megapost https://example.com/shoe.jpg --category story --category model
"""

import asyncio
import sys

from dotenv import load_dotenv

from megapost.config import Settings, configure_logging
from megapost.models.schemas import ALL_CATEGORIES, CATEGORY_TITLES, Category, GenerationStatus
from megapost.services.downloads import save_all_images
from megapost.services.errors import MegapostError
from megapost.services.image_fetcher import fetch_image_from_url, load_image_file
from megapost.services.orchestrator import GenerationOrchestrator


def print_banner():
    """Print a nice ASCII banner"""
    banner = """
╔═══════════════════════════════════════════════════════╗
║                                                       ║
║           📸 MEGAPOST MARKETING IMAGE GENERATOR       ║
║                                                       ║
║              Powered by Google Gemini                 ║
║                                                       ║
╚═══════════════════════════════════════════════════════╝
"""
    print(banner)


def print_usage():
    """Print usage instructions"""
    print("\nUsage:")
    print("  megapost <image.jpg | https://...> [--category NAME ...] [--output DIR]")
    print("\nExamples:")
    print("  megapost products/mug.png")
    print("  megapost https://example.com/shoe.jpg --category story --category model")
    print("\nArguments:")
    print("  image              Product image path or http(s) URL")
    print("  --category NAME    (Optional, repeatable) Only generate these categories")
    print("  --output DIR       (Optional) Where to save images (default: output)")
    print("\nCategories:")
    for category in ALL_CATEGORIES:
        print(f"  {category.value:<16} {CATEGORY_TITLES[category]}")
    print("\nRequirements:")
    print("  - Valid image formats: png, jpg, jpeg, webp, gif")
    print("  - API key set in .env file:")
    print("    • GOOGLE_API_KEY")
    print()


def check_environment(settings):
    """
    Check that required environment variables are set.

    Returns:
        bool: True if all required vars are set, False otherwise
    """
    missing_vars = settings.missing_credentials()

    if missing_vars:
        print("❌ Error: Missing required environment variables:")
        for var in missing_vars:
            print(f"   - {var}")
        print("\nPlease set these in your .env file.")
        return False

    return True


def parse_args(args):
    """
    Parse command line arguments.

    Returns:
        tuple: (source, categories, output_dir)

    Raises:
        ValueError: On missing values or unknown categories
    """
    source = None
    categories = []
    output_dir = None

    i = 0
    while i < len(args):
        if args[i] in ('--category', '--output'):
            if i + 1 >= len(args):
                raise ValueError(f"{args[i]} requires a value")
            if args[i] == '--category':
                try:
                    categories.append(Category(args[i + 1]))
                except ValueError:
                    raise ValueError(f"Unknown category: {args[i + 1]}")
            else:
                output_dir = args[i + 1]
            i += 2
        elif source is None:
            source = args[i]
            i += 1
        else:
            raise ValueError(f"Unexpected argument: {args[i]}")

    if source is None:
        raise ValueError("No image provided")

    return source, categories, output_dir


def print_update(category, state, progress):
    """Progress callback for the orchestrator"""
    title = CATEGORY_TITLES[category]
    if state.status is GenerationStatus.IN_PROGRESS:
        print(f"   🎨 {title}...")
    elif state.status is GenerationStatus.SUCCEEDED:
        print(f"   ✓ {title} complete ({progress}%)")
    elif state.status is GenerationStatus.FAILED:
        print(f"   ✗ {title} failed: {state.error} ({progress}%)")


async def run_generation(orchestrator, categories):
    if not categories:
        await orchestrator.generate_all()
        return

    await asyncio.gather(*[orchestrator.regenerate(category) for category in categories])


def main(argv=None):
    """Main CLI orchestrator"""
    load_dotenv()
    settings = Settings.from_env()
    configure_logging("WARNING")

    print_banner()

    args = sys.argv[1:] if argv is None else argv

    if not args:
        print("❌ Error: No image provided")
        print_usage()
        return 1

    if args[0] in ['-h', '--help', 'help']:
        print_usage()
        return 0

    try:
        source_arg, categories, output_dir = parse_args(args)
    except ValueError as e:
        print(f"❌ Error: {e}")
        print_usage()
        return 1

    output_dir = output_dir or settings.output_folder

    # Step 0: Check environment
    print("\n🔑 Checking environment variables...")
    if not check_environment(settings):
        return 1
    print("   ✓ API key found")

    try:
        # Step 1: Load the product image
        print("\n📋 Step 1: Loading product image...")
        if source_arg.startswith(('http://', 'https://')):
            source = fetch_image_from_url(source_arg, timeout=settings.fetch_timeout)
        else:
            source = load_image_file(source_arg)
        print(f"   ✓ {source.filename} ({source.mime_type}, {source.size} bytes)")

        orchestrator = GenerationOrchestrator(
            on_update=print_update,
            api_key=settings.api_key,
            model=settings.model,
        )
        orchestrator.select_image(source)

        # Step 2: Generate all variants in parallel
        count = len(categories) or len(ALL_CATEGORIES)
        print(f"\n🚀 Step 2: Generating {count} image(s) with Gemini in parallel...")
        asyncio.run(run_generation(orchestrator, categories))

        # Step 3: Save results
        print(f"\n💾 Step 3: Saving images to {output_dir}/...")
        saved = save_all_images(orchestrator.states.generated_images(), output_dir)

    except FileNotFoundError as e:
        print(f"\n❌ Error: {e}")
        print("   Please check that the image path is correct.")
        return 1

    except MegapostError as e:
        print(f"\n❌ Error: {e}")
        return 1

    print("\n" + "=" * 55)
    if saved:
        print(f"✅ SUCCESS! {len(saved)} image(s) generated!")
    else:
        print("❌ No images were generated.")
    print("=" * 55)

    for path in saved:
        print(f"📁 {path}")

    for category, error in orchestrator.states.error_states().items():
        if error:
            print(f"❌ {CATEGORY_TITLES[category]}: {error}")

    print()
    return 0 if saved else 1


if __name__ == "__main__":
    sys.exit(main())
