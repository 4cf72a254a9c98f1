"""
Seed hardware registry.

The static table of known parts the assistant can reference by id. Parts
without declared ports still resolve from the catalog (priced, branded) but
are treated as trivially compatible by the validator.
"""
from buildsheet.models.drafting_schema import Gender, Part, Port, PortType

M, F = Gender.MALE, Gender.FEMALE
MECH, ELEC, DATA = PortType.MECHANICAL, PortType.ELECTRICAL, PortType.DATA


def _part(id, sku, name, category, brand, price, description, ports=()):
    return Part(
        id=id, sku=sku, name=name, category=category, brand=brand,
        price=price, description=description,
        ports=[Port(id=p[0], name=p[1], type=p[2], gender=p[3], spec=p[4]) for p in ports],
    )


HARDWARE_REGISTRY = [
    # ── Custom keyboard ──────────────────────────────────────────────────────
    _part("kb-pcb-1", "BS-KB-PCB-65", "BuildSheet 65% Hot-swap PCB", "Keyboard PCB",
          "BuildSheet Engineering", 45.00,
          "A 65% PCB with support for multi-layout hot-swap sockets.",
          [("p1", "Switch Socket (68x)", MECH, F, "mx-socket"),
           ("p2", "USB-C In", DATA, F, "usb-c")]),
    _part("kb-sw-1", "GMK-LINEAR-01", "Gateron Milky Yellow Linear Switches", "Switch",
          "Gateron", 0.25, "Smooth linear switches with a classic milky housing.",
          [("s1", "Mounting Pins", MECH, M, "mx-socket")]),
    _part("kb-case-1", "TOFU-65-ALU", "Tofu65 Aluminum Case", "Case", "KBDfans", 110.00,
          "Heavy aluminum block CNC case for 65% PCBs.",
          [("c1", "PCB Mounting Pillars", MECH, M, "pcb-mount-standard")]),

    # ── Embedded compute & MCUs ──────────────────────────────────────────────
    _part("mcu-esp32-wroom", "ESP32-WROOM-32D", "ESP32-WROOM-32D Development Board",
          "Microcontroller", "Espressif", 6.50,
          "WiFi + Bluetooth dual-core microcontroller. Perfect for IoT.",
          [("gpio", "GPIO Header", ELEC, M, "2.54mm-pitch"),
           ("usb", "Micro-USB Power/Data", DATA, F, "micro-usb")]),
    _part("mcu-arduino-uno", "ARD-UNO-R3", "Arduino Uno R3", "Microcontroller", "Arduino", 24.00,
          "The classic entry-level development board for electronics.",
          [("io", "Digital/Analog Pins", ELEC, F, "2.54mm-header"),
           ("jack", "Barrel Jack", ELEC, F, "dc-jack-5.5-2.1")]),
    _part("mcu-rpi-4", "RPI4-8GB", "Raspberry Pi 4 Model B (8GB)", "Single Board Computer",
          "Raspberry Pi Foundation", 75.00,
          "Powerful quad-core SBC for high-compute applications.",
          [("gpio", "40-Pin Header", ELEC, M, "rpi-gpio"),
           ("hdmi", "Micro-HDMI (x2)", DATA, F, "micro-hdmi"),
           ("usb-c", "USB-C Power", ELEC, F, "usb-c-pwr")]),
    _part("mcu-esp8266-d1", "D1-MINI-ESP8266", "Wemos D1 Mini ESP8266", "Microcontroller",
          "Wemos", 4.00, "Tiny WiFi enabled microcontroller board.",
          [("pins", "Header Pins", ELEC, M, "d1-mini-header")]),

    # ── Drone / FPV ──────────────────────────────────────────────────────────
    _part("drone-mot-xing2", "IFL-XING2-2207", "XING2 2207 1855KV Motor", "Brushless Motor",
          "iFlight", 26.99, "High-performance motor for 5-inch FPV drones.",
          [("base", "Motor Mount (16x16)", MECH, M, "m3-16x16"),
           ("leads", "Phase Wires", ELEC, M, "solder-point")]),
    _part("drone-fc-stack", "S-BEE-F7-STACK", "SpeedyBee F7 V3 Stack (FC + 50A ESC)",
          "Flight Stack", "SpeedyBee", 105.00,
          "F7 Flight Controller paired with a 50A 4-in-1 ESC.",
          [("mount", "Stack Mount (30.5x30.5)", MECH, F, "m3-30x30"),
           ("vtx", "VTX Port", DATA, F, "sh1.0-6pin"),
           ("batt", "Battery Pads", ELEC, F, "solder-pads-heavy")]),
    _part("drone-cam-vista", "CADDX-VISTA", "Caddx Vista Digital VTX", "Video Transmitter",
          "Caddx", 145.00, "Digital HD FPV transmitter compatible with DJI Goggles.",
          [("ant", "U.FL Antenna", DATA, F, "u.fl"),
           ("input", "Power/Data", ELEC, F, "sh1.0-6pin")]),
    _part("drone-prop-hq", "HQ-V2S-5X43", "HQProp Ethix S3 Propeller (5 inch)", "Propeller",
          "HQProp", 3.50, "Watermelon green propellers for freestyle FPV.",
          [("hub", "Motor Hub", MECH, F, "5mm-prop-hub")]),
    _part("drone-frame-apex", "IMP-APEX-5", 'ImpulseRC Apex 5" Frame Kit', "Frame",
          "ImpulseRC", 95.00, "Indestructible freestyle drone frame.",
          [("fc-mount", "FC Stack Mount", MECH, M, "m3-30x30"),
           ("mot-mount", "Arm Mounts", MECH, F, "m3-16x16")]),
    _part("drone-rx-crsf", "TBS-NANO-RX", "TBS Crossfire Nano RX", "Receiver",
          "Team BlackSheep", 29.95, "Long range FPV receiver."),
    _part("drone-ant-fox", "FOX-LHP-ANT", "Foxeer Lollipop 4 Antenna", "Antenna",
          "Foxeer", 19.99, "RHCP FPV antenna."),

    # ── Robotics & motion ────────────────────────────────────────────────────
    _part("rob-servo-mg996r", "TW-MG996R", "MG996R High Torque Metal Gear Servo", "Servo",
          "TowerPro", 9.50, "Metal gear servo for high torque robotic applications.",
          [("out", "Output Spline", MECH, M, "25T-spline"),
           ("pwr", "Servo Cable", ELEC, F, "3-pin-servo")]),
    _part("rob-mot-nema17", "STEP-NEMA17-42", "NEMA 17 Stepper Motor (42mm)", "Stepper Motor",
          "Generic", 16.00, "Standard stepper motor for 3D printers and CNCs.",
          [("shaft", "D-Shaft (5mm)", MECH, M, "5mm-shaft"),
           ("conn", "6-Pin Connector", ELEC, F, "jst-ph-6")]),
    _part("rob-lin-act", "LIN-ACT-100", "100mm Stroke Linear Actuator", "Actuator",
          "Progressive", 45.00, "Electric piston for linear motion control.",
          [("mount", "Clevis Mount", MECH, M, "clevis-pin")]),
    _part("rob-enc-600", "ROT-ENC-600", "600P/R Incremental Rotary Encoder", "Encoder",
          "Omron Compatible", 18.00, "Rotary encoder for precise position feedback.",
          [("shaft", "6mm Shaft", MECH, M, "6mm-shaft")]),
    _part("rob-dvr-l298n", "L298N-H-BRIDGE", "L298N Dual H-Bridge Motor Driver", "Driver",
          "Generic", 4.50, "Controls two DC motors."),
    _part("rob-omni-wheel", "OMNI-60MM", "60mm Omni-Directional Wheel", "Motion",
          "Generic", 14.00, "Multi-directional movement."),

    # ── Sensors ──────────────────────────────────────────────────────────────
    _part("sen-dht22", "SEN-DHT22", "DHT22 Temperature & Humidity Sensor",
          "Environmental Sensor", "Generic", 5.50, "Digital sensor for reading ambient conditions.",
          [("out", "Digital Output", ELEC, M, "1-wire-header")]),
    _part("sen-us-04", "HC-SR04", "HC-SR04 Ultrasonic Distance Sensor", "Range Sensor",
          "Generic", 3.50, "Measures distance via ultrasonic echo.",
          [("pins", "4-Pin Header", ELEC, M, "hc-sr04-pins")]),
    _part("sen-imu-6050", "MPU-6050-MOD", "MPU-6050 6-Axis Accelerometer/Gyro", "IMU",
          "TDK InvenSense", 4.00, "Inertial measurement unit for balance and motion tracking.",
          [("bus", "I2C Interface", DATA, M, "i2c-header")]),
    _part("sen-lidar-tf", "BEN-TF-MINI", "TF-Mini LiDAR Rangefinder", "LiDAR", "Benewake", 39.00,
          "Compact laser range sensor for precision robotics.",
          [("uart", "UART Port", DATA, F, "jst-gh-4")]),
    _part("sen-prs-bmp", "BMP280-MOD", "BMP280 Barometric Pressure Sensor", "Sensor",
          "Bosch", 4.00, "Altitude and pressure sensing."),
    _part("sen-gas-mq2", "MQ2-GAS-SEN", "MQ2 Combustible Gas Sensor", "Sensor",
          "Generic", 5.00, "Detects smoke/gas leaks."),
    _part("sen-weight-hx", "HX711-LOAD-5KG", "5kg Load Cell + HX711 Amp", "Sensor",
          "Generic", 11.00, "Scale/Weight sensor kit."),

    # ── Power ────────────────────────────────────────────────────────────────
    _part("pwr-lipo-4s", "OV-4S-1500", "Ovonic 4S 1500mAh 100C LiPo", "Battery", "Ovonic", 22.00,
          "High-discharge battery for racing drones.",
          [("main", "XT60 Discharge", ELEC, F, "xt60"),
           ("bal", "4S Balance Lead", ELEC, F, "jst-xh-4s")]),
    _part("pwr-buck-adj", "LM2596-MOD", "LM2596 Step-Down Buck Converter", "Power Module",
          "Generic", 2.50, "Efficient voltage regulator module.",
          [("in", "Voltage Input", ELEC, F, "solder-pads"),
           ("out", "Regulated Output", ELEC, F, "solder-pads")]),
    _part("pwr-sol-6v", "SOLAR-6V-2W", "6V 2W Monocrystalline Solar Panel", "Energy Source",
          "Generic", 12.00, "Small rigid panel for remote weather stations.",
          [("wire", "Positive/Negative Lead", ELEC, M, "wire-tinned")]),
    _part("pwr-tp4056", "TP4056-LIPO", "TP4056 Li-Ion Charging Module", "Power",
          "Generic", 1.50, "Safe charging for single cells."),
    _part("pwr-dc-5v", "PWR-5V-2A-ADAP", "5V 2A DC Power Adapter", "Power",
          "Generic", 8.00, "Standard wall adapter."),

    # ── Mechanical ───────────────────────────────────────────────────────────
    _part("mech-ext-2020", "ALU-2020-1M", "2020 Aluminum Extrusion (1m)", "Structure",
          "Generic", 15.00, "T-Slot structural profile for framing.",
          [("slot", "T-Slot Groove", MECH, F, "2020-slot")]),
    _part("mech-scr-m3-8", "SCR-M3-8-BTN", "M3x8mm Button Head Screw (50pk)", "Fastener",
          "Generic", 4.50, "Standard black oxide hardware.",
          [("thrd", "Thread", MECH, M, "m3-thread")]),
    _part("mech-tnut-m3", "TNUT-2020-M3", "2020 Series M3 T-Nut (20pk)", "Fastener",
          "Generic", 6.00, "Slide-in nuts for aluminum extrusions.",
          [("fit", "Slot Fit", MECH, M, "2020-slot"),
           ("thrd", "Threaded Hole", MECH, F, "m3-thread")]),
    _part("mech-stdf-m3", "STDF-M3-10-HEX", "M3x10mm Brass Standoff (20pk)", "Mechanical",
          "Generic", 4.50, "PCB support spacer."),
    _part("mech-bear-608", "BEAR-608ZZ", "608ZZ Ball Bearing", "Motion", "Bones", 1.50,
          "Skateboard style bearing."),

    # ── PC / desktop ─────────────────────────────────────────────────────────
    _part("pc-fan-noctua", "NOC-NF-A12", "Noctua NF-A12x25 PWM Fan", "Cooling", "Noctua", 32.90,
          "The quietest and most efficient 120mm fan on the market.",
          [("pwr", "4-Pin PWM", ELEC, F, "fan-4pin"),
           ("mount", "Screw Holes (120mm)", MECH, F, "pc-fan-mount-120")]),
    _part("pc-ssd-nvme", "SAMSUNG-980-1TB", "Samsung 980 Pro NVMe 1TB", "Storage", "Samsung", 99.00,
          "Gen4 high speed internal SSD.",
          [("m2", "M.2 Key M", DATA, M, "m.2-m")]),

    # ── Automotive powertrain ────────────────────────────────────────────────
    _part("truck-eng-1", "CHEVY-LS-53-ALU", "GM 5.3L LS V8 (Aluminum Block)", "Engine",
          "GM Performance", 4200.00,
          "Modern aluminum block LS-series V8. Significantly lighter than iron blocks.",
          [("e1", "Bellhousing Mount", MECH, F, "chevy-v8-bellhousing"),
           ("e2", "Engine Mounts", MECH, M, "chevy-ls-mount")]),
    _part("truck-trans-1", "4L60E-TRANS", "4L60E Automatic Transmission", "Transmission",
          "GM Performance", 1800.00, "Electronic 4-speed automatic transmission.",
          [("t1", "Engine Input", MECH, M, "chevy-v8-bellhousing"),
           ("t2", "Driveshaft Output", MECH, F, "u-joint-1310")]),

    # ── Flashlight ───────────────────────────────────────────────────────────
    _part("batt-18650", "LION-18650-3500", "Panasonic 18650 Battery", "Power", "Panasonic", 8.50,
          "High capacity 3500mAh Li-ion cell (Flat Top).",
          [("b1", "Positive Contact", ELEC, M, "batt-contact-pos"),
           ("b2", "Negative Contact", ELEC, M, "batt-contact-neg"),
           ("b3", "Form Factor", MECH, M, "18650-tube")]),
    _part("led-driver-ic", "AMC-7135-PCB", "17mm Constant Current Driver", "Controller",
          "Generic", 4.50, "Regulates power to LED. Fits 17mm driver pill.",
          [("d1", "Battery Input (+)", ELEC, F, "batt-contact-pos"),
           ("d2", "LED Output", ELEC, F, "solder-pad-led"),
           ("d3", "Mounting", MECH, M, "17mm-driver-slot")]),
    _part("led-emitter", "CREE-XPL-HI", "Cree XP-L HI Emitter", "Light Engine", "Cree", 6.00,
          "High intensity LED on 16mm MCPCB.",
          [("l1", "Power Input", ELEC, M, "solder-pad-led"),
           ("l2", "Base Plate", MECH, M, "16mm-mcpcb-shelf")]),
    _part("flashlight-body", "C8-HOST-ALU", "C8 Aluminum Host", "Chassis", "Convoy", 18.00,
          "Complete host body including reflector, lens, and tail switch.",
          [("h1", "Driver Bay", MECH, F, "17mm-driver-slot"),
           ("h2", "Battery Tube", MECH, F, "18650-tube"),
           ("h3", "LED Shelf", MECH, F, "16mm-mcpcb-shelf")]),

    # ── Connectors & cables ──────────────────────────────────────────────────
    _part("conn-xt60-pair", "AMASS-XT60", "Amass XT60 Connectors (Pair)", "Connector",
          "Amass", 1.50, "Gold-plated high current power connectors.",
          [("m", "Male End", ELEC, M, "xt60"),
           ("f", "Female End", ELEC, F, "xt60")]),
    _part("conn-jst-xh-set", "JST-XH-2.54", "JST-XH 2.54mm Connector Kit", "Connector",
          "Generic", 12.00, "Standard balance leads and small signal connector kit."),
    _part("conn-usb-break", "USB-C-BREAKOUT", "USB-C Female Breakout Board", "Connector",
          "Generic", 2.50, "Easy access to USB-C pins."),

    # ── IO & displays ────────────────────────────────────────────────────────
    _part("io-oled-0.96", "SSD1306-OLED", '0.96" I2C OLED Display', "Display", "Generic", 4.50,
          "128x64 pixels monochrome display.",
          [("i2c", "I2C Interface", DATA, M, "i2c-header")]),
    _part("io-btn-arcade", "ARC-BTN-30", "30mm Arcade Button", "Input", "Sanwa Compatible", 2.20,
          "High-speed reactive push button.",
          [("sw", "Terminal Pair", ELEC, M, "quick-disconnect")]),
    _part("io-lcd-1602", "LCD-1602-I2C", "1602 Character LCD (I2C Module)", "Display",
          "Generic", 6.50, "2x16 text screen."),
    _part("io-neopixel-16", "NEO-RING-16", "16-LED NeoPixel Ring (WS2812B)", "Light Engine",
          "Adafruit", 9.95, "Addressable RGB LED ring."),

    # ── Passive components ───────────────────────────────────────────────────
    _part("comp-resistor-10k", "RES-10K-025W", "10k Ohm Resistor (100pk)", "Electronic Component",
          "Yageo", 1.50, "Standard pull-up resistor."),
    _part("comp-cap-10uf", "CAP-10UF-25V", "10uF Electrolytic Capacitor", "Electronic Component",
          "Rubycon", 0.20, "Power filter cap."),
    _part("comp-proto-82", "BRD-PROTO-82", "Glass Fiber Proto-Board (8x12cm)", "Prototyping",
          "Generic", 2.00, "Permanent soldering board."),
]
